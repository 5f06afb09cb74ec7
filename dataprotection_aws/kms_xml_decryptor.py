"""XML decryptor that reverses KmsXmlEncryptor."""

import base64
import binascii
import logging
from typing import Any, Optional
from xml.etree.ElementTree import Element, ParseError

from botocore.exceptions import BotoCoreError, ClientError

from dataprotection_aws.config import KmsXmlEncryptorConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import DecryptionError
from dataprotection_aws.interfaces import XmlDecryptor
from dataprotection_aws.kms_context import build_kms_request, resolve_application_discriminator
from dataprotection_aws.validation_utils import require_not_none
from dataprotection_aws.xml_utils import parse_element

logger = logging.getLogger(__name__)


class KmsXmlDecryptor(XmlDecryptor):
    """Decrypts ``encryptedKey`` elements written by KmsXmlEncryptor."""

    @classmethod
    def from_services(cls, services: Any) -> "KmsXmlDecryptor":
        """Create a decryptor from a service provider.

        This is how the key manager activates the decryptor type recorded in
        an EncryptedXmlInfo.

        Args:
            services: ServiceProvider with a KMS client and KmsXmlEncryptorConfig

        Returns:
            KmsXmlDecryptor instance

        Raises:
            ValidationError: If services is None
            ServiceResolutionError: If a required service is not registered
        """
        require_not_none(services, "Services")
        return cls(
            services.get_required_service(Constants.KMS_CLIENT_SERVICE()),
            services.get_required_service(KmsXmlEncryptorConfig),
            services,
        )

    def __init__(
        self,
        kms_client: Any,
        config: KmsXmlEncryptorConfig,
        services: Optional[Any] = None
    ) -> None:
        """Initialize the decryptor.

        Args:
            kms_client: boto3 KMS client
            config: The configuration the element was encrypted with
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
        """Get the decryptor configuration."""
        return self._config

    def decrypt(self, encrypted_element: Element) -> Element:
        """Decrypt an ``encryptedKey`` element.

        Args:
            encrypted_element: Element produced by KmsXmlEncryptor

        Returns:
            The original plaintext key element

        Raises:
            ValidationError: If encrypted_element is None
            DecryptionError: If the element is malformed or the KMS call fails
        """
        require_not_none(encrypted_element, "Encrypted element")

        value = encrypted_element.find(Constants.ENCRYPTED_VALUE_ELEMENT())
        if value is None or not (value.text or "").strip():
            raise DecryptionError("Encrypted element has no value to decrypt")

        try:
            ciphertext = base64.b64decode(value.text.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(f"Encrypted value is not valid base64: {e}") from e

        logger.debug(f"Decrypting data protection key using AWS key {self._config.key_id}")

        request = build_kms_request(self._config, resolve_application_discriminator(self._services))
        request["CiphertextBlob"] = ciphertext

        try:
            response = self._kms_client.decrypt(**request)
        except (BotoCoreError, ClientError) as e:
            raise DecryptionError(f"Failed to decrypt key element with KMS key {self._config.key_id}: {e}") from e

        try:
            return parse_element(response["Plaintext"])
        except ParseError as e:
            raise DecryptionError(f"Decrypted key element is not valid XML: {e}") from e
