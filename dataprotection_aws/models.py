"""Data models shared by the data protection adapters."""

from dataclasses import dataclass
from xml.etree.ElementTree import Element

from dataprotection_aws.exceptions import ValidationError


@dataclass(frozen=True)
class EncryptedXmlInfo:
    """Result of encrypting a key element.

    Attributes:
        encrypted_element: The element to persist in place of the plaintext
        decryptor_type: The XmlDecryptor subclass able to reverse the encryption
    """

    encrypted_element: Element
    decryptor_type: type

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        # Imported here, interfaces depends on this module
        from dataprotection_aws.interfaces import XmlDecryptor

        if self.encrypted_element is None:
            raise ValidationError("Encrypted element cannot be None")
        if self.decryptor_type is None:
            raise ValidationError("Decryptor type cannot be None")
        if not isinstance(self.decryptor_type, type) or not issubclass(self.decryptor_type, XmlDecryptor):
            raise ValidationError(
                f"Decryptor type must be an XmlDecryptor subclass, got {self.decryptor_type!r}"
            )
