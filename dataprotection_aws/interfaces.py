"""Capability interfaces the data protection key manager plugs adapters into."""

import abc
from xml.etree.ElementTree import Element

from dataprotection_aws.models import EncryptedXmlInfo


class XmlRepository(abc.ABC):
    """Stores and retrieves the XML elements that make up the key ring."""

    @abc.abstractmethod
    def get_all_elements(self) -> tuple[Element, ...]:
        """Return every top-level XML element in the repository."""

    @abc.abstractmethod
    def store_element(self, element: Element, friendly_name: str | None) -> str | None:
        """Add a top-level XML element to the repository.

        Args:
            element: Element to persist
            friendly_name: Optional name hint; implementations may ignore it

        Returns:
            Where the element was stored, or None if the repository has no such notion
        """


class XmlEncryptor(abc.ABC):
    """Encrypts a key element before it reaches the repository."""

    @abc.abstractmethod
    def encrypt(self, plaintext_element: Element) -> EncryptedXmlInfo:
        """Encrypt an element, naming the decryptor able to reverse it."""


class XmlDecryptor(abc.ABC):
    """Reverses an :class:`XmlEncryptor`."""

    @abc.abstractmethod
    def decrypt(self, encrypted_element: Element) -> Element:
        """Decrypt an element produced by the matching encryptor."""
