"""XML encryptor that protects data protection keys with an AWS KMS key."""

import base64
import logging
from typing import Any, Optional
from xml.etree.ElementTree import Comment, Element, SubElement

from botocore.exceptions import BotoCoreError, ClientError

from dataprotection_aws.config import KmsXmlEncryptorConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import EncryptionError
from dataprotection_aws.interfaces import XmlEncryptor
from dataprotection_aws.kms_context import build_kms_request, resolve_application_discriminator
from dataprotection_aws.kms_xml_decryptor import KmsXmlDecryptor
from dataprotection_aws.models import EncryptedXmlInfo
from dataprotection_aws.validation_utils import require_not_none
from dataprotection_aws.xml_utils import serialize_element

logger = logging.getLogger(__name__)


class KmsXmlEncryptor(XmlEncryptor):
    """Encrypts key elements with a KMS key before they are persisted."""

    def __init__(
        self,
        kms_client: Any,
        config: KmsXmlEncryptorConfig,
        services: Optional[Any] = None
    ) -> None:
        """Initialize the encryptor.

        Args:
            kms_client: boto3 KMS client
            config: Configuration specifying which KMS key and context to use
            services: Optional ServiceProvider supplying DataProtectionOptions

        Raises:
            ValidationError: If kms_client or config is None
        """
        require_not_none(kms_client, "KMS client")
        require_not_none(config, "KMS encryptor config")

        self._kms_client = kms_client
        self._config = config
        self._services = services

    @property
    def config(self) -> KmsXmlEncryptorConfig:
        """Get the encryptor configuration."""
        return self._config

    @property
    def kms_client(self) -> Any:
        """Get the KMS client."""
        return self._kms_client

    @property
    def services(self) -> Optional[Any]:
        """Get the service provider supplied at construction."""
        return self._services

    def encrypt(self, plaintext_element: Element) -> EncryptedXmlInfo:
        """Encrypt a key element with the configured KMS key.

        Args:
            plaintext_element: Key element to encrypt

        Returns:
            EncryptedXmlInfo wrapping an ``encryptedKey`` element, decryptable
            by KmsXmlDecryptor

        Raises:
            ValidationError: If plaintext_element is None
            EncryptionError: If the KMS call fails
        """
        require_not_none(plaintext_element, "Plaintext element")

        logger.debug(f"Encrypting plaintext data protection key using AWS key {self._config.key_id}")

        # The element is already an in-memory string, so no attempt is made to
        # scrub the serialized copy
        request = build_kms_request(self._config, resolve_application_discriminator(self._services))
        request["Plaintext"] = serialize_element(plaintext_element)

        try:
            response = self._kms_client.encrypt(**request)
        except (BotoCoreError, ClientError) as e:
            raise EncryptionError(f"Failed to encrypt key element with KMS key {self._config.key_id}: {e}") from e

        element = Element(Constants.ENCRYPTED_KEY_ELEMENT())
        element.append(Comment(Constants.ENCRYPTED_KEY_COMMENT()))
        value = SubElement(element, Constants.ENCRYPTED_VALUE_ELEMENT())
        value.text = base64.b64encode(response["CiphertextBlob"]).decode("ascii")

        return EncryptedXmlInfo(element, KmsXmlDecryptor)
