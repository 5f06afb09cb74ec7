"""Configuration objects for the S3 repository and KMS encryptor."""

import json
import os
from dataclasses import dataclass, field
from typing import Optional

from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import ValidationError
from dataprotection_aws.validation_utils import validate_key_prefix, validate_not_blank

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _read_env(name: str) -> Optional[str]:
    """Read an environment variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValidationError(f"Environment variable {name} must be a boolean, got {value!r}")


def _validate_env_prefix(prefix: str) -> None:
    # Guard against None prefix parameter
    if prefix is None:
        raise ValidationError("Environment variable prefix cannot be None")

    # Guard against whitespace-only prefix parameter
    if prefix != "" and prefix.strip() == "":
        raise ValidationError("Environment variable prefix cannot contain only whitespace")


@dataclass
class DataProtectionOptions:
    """Application-wide data protection options."""

    # Isolates key material between applications sharing a key store
    application_discriminator: Optional[str] = None


@dataclass
class S3XmlRepositoryConfig:
    """Configuration describing how key XML is written to and read from S3."""

    bucket: str
    key_prefix: str = Constants.DEFAULT_KEY_PREFIX()
    max_s3_retrieval_concurrency: int = Constants.DEFAULT_MAX_S3_RETRIEVAL_CONCURRENCY()
    storage_class: str = Constants.DEFAULT_STORAGE_CLASS()
    server_side_encryption_method: Optional[str] = Constants.DEFAULT_SERVER_SIDE_ENCRYPTION_METHOD()
    server_side_encryption_kms_key_id: Optional[str] = None
    server_side_encryption_customer_method: Optional[str] = None
    server_side_encryption_customer_key: Optional[str] = None
    server_side_encryption_customer_key_md5: Optional[str] = None
    client_side_compression: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        validate_not_blank(self.bucket, "Bucket")
        validate_key_prefix(self.key_prefix)

        if self.max_s3_retrieval_concurrency < 1:
            raise ValidationError("max_s3_retrieval_concurrency must be at least 1")

        if self.storage_class not in Constants.STORAGE_CLASSES():
            raise ValidationError(f"Unsupported S3 storage class: {self.storage_class}")

        # Validate server-side encryption settings
        method = self.server_side_encryption_method
        if method is not None and method not in Constants.SERVER_SIDE_ENCRYPTION_METHODS():
            raise ValidationError(f"Unsupported server-side encryption method: {method}")

        if self.server_side_encryption_kms_key_id is not None:
            if method is None or not method.startswith("aws:kms"):
                raise ValidationError(
                    "server_side_encryption_kms_key_id requires an aws:kms server-side encryption method"
                )

        # Validate customer-provided key settings
        customer_method = self.server_side_encryption_customer_method
        if customer_method is not None:
            if customer_method not in Constants.SERVER_SIDE_ENCRYPTION_CUSTOMER_METHODS():
                raise ValidationError(f"Unsupported customer encryption method: {customer_method}")
            if method is not None:
                raise ValidationError(
                    "server_side_encryption_method must be None when using a customer-provided key"
                )
            if not self.server_side_encryption_customer_key:
                raise ValidationError(
                    "server_side_encryption_customer_key is required with a customer encryption method"
                )
        elif self.server_side_encryption_customer_key or self.server_side_encryption_customer_key_md5:
            raise ValidationError(
                "A customer-provided key requires server_side_encryption_customer_method"
            )

    @property
    def uses_customer_key(self) -> bool:
        """Whether objects are encrypted with a customer-provided key."""
        return self.server_side_encryption_customer_method is not None

    @classmethod
    def from_environment(cls, prefix: str = "DATAPROTECTION_S3_") -> "S3XmlRepositoryConfig":
        """Create a configuration from environment variables.

        Reads ``<prefix>BUCKET`` (required), ``<prefix>KEY_PREFIX``,
        ``<prefix>MAX_RETRIEVAL_CONCURRENCY``, ``<prefix>STORAGE_CLASS``,
        ``<prefix>SSE_METHOD``, ``<prefix>SSE_KMS_KEY_ID`` and
        ``<prefix>CLIENT_SIDE_COMPRESSION``. ``SSE_METHOD=none`` disables
        server-side encryption.

        Args:
            prefix: Prefix shared by all variable names

        Returns:
            S3XmlRepositoryConfig instance

        Raises:
            ValidationError: If a variable is missing or malformed
        """
        _validate_env_prefix(prefix)

        bucket = _read_env(f"{prefix}BUCKET")
        if bucket is None:
            raise ValidationError(f"Environment variable {prefix}BUCKET not set")

        kwargs: dict = {"bucket": bucket}

        key_prefix = os.getenv(f"{prefix}KEY_PREFIX")
        if key_prefix is not None:
            kwargs["key_prefix"] = key_prefix.strip()

        concurrency = _read_env(f"{prefix}MAX_RETRIEVAL_CONCURRENCY")
        if concurrency is not None:
            try:
                kwargs["max_s3_retrieval_concurrency"] = int(concurrency)
            except ValueError as e:
                raise ValidationError(
                    f"Environment variable {prefix}MAX_RETRIEVAL_CONCURRENCY must be an integer"
                ) from e

        storage_class = _read_env(f"{prefix}STORAGE_CLASS")
        if storage_class is not None:
            kwargs["storage_class"] = storage_class

        sse_method = _read_env(f"{prefix}SSE_METHOD")
        if sse_method is not None:
            kwargs["server_side_encryption_method"] = None if sse_method.lower() == "none" else sse_method

        sse_kms_key_id = _read_env(f"{prefix}SSE_KMS_KEY_ID")
        if sse_kms_key_id is not None:
            kwargs["server_side_encryption_kms_key_id"] = sse_kms_key_id

        compression = _read_env(f"{prefix}CLIENT_SIDE_COMPRESSION")
        if compression is not None:
            kwargs["client_side_compression"] = _parse_bool(f"{prefix}CLIENT_SIDE_COMPRESSION", compression)

        return cls(**kwargs)


@dataclass
class KmsXmlEncryptorConfig:
    """Configuration describing which KMS key and context protect key XML."""

    key_id: str
    encryption_context: dict[str, str] = field(default_factory=dict)
    grant_tokens: list[str] = field(default_factory=list)
    discriminator_as_context: bool = True
    hash_discriminator_context: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        validate_not_blank(self.key_id, "KMS key id")

        if self.encryption_context is None:
            raise ValidationError("Encryption context cannot be None")
        if self.grant_tokens is None:
            raise ValidationError("Grant tokens cannot be None")

        # Take copies so later changes by the caller do not leak in
        self.encryption_context = dict(self.encryption_context)
        self.grant_tokens = list(self.grant_tokens)

        for name, value in self.encryption_context.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise ValidationError("Encryption context keys and values must be strings")

        if Constants.DISCRIMINATOR_CONTEXT_KEY() in self.encryption_context:
            raise ValidationError(
                f"Encryption context key {Constants.DISCRIMINATOR_CONTEXT_KEY()} is reserved"
            )

        for token in self.grant_tokens:
            validate_not_blank(token, "Grant token")

    @classmethod
    def from_environment(cls, prefix: str = "DATAPROTECTION_KMS_") -> "KmsXmlEncryptorConfig":
        """Create a configuration from environment variables.

        Reads ``<prefix>KEY_ID`` (required), ``<prefix>ENCRYPTION_CONTEXT``
        (a JSON object of strings), ``<prefix>GRANT_TOKENS`` (comma separated),
        ``<prefix>DISCRIMINATOR_AS_CONTEXT`` and
        ``<prefix>HASH_DISCRIMINATOR_CONTEXT``.

        Args:
            prefix: Prefix shared by all variable names

        Returns:
            KmsXmlEncryptorConfig instance

        Raises:
            ValidationError: If a variable is missing or malformed
        """
        _validate_env_prefix(prefix)

        key_id = _read_env(f"{prefix}KEY_ID")
        if key_id is None:
            raise ValidationError(f"Environment variable {prefix}KEY_ID not set")

        kwargs: dict = {"key_id": key_id}

        context = _read_env(f"{prefix}ENCRYPTION_CONTEXT")
        if context is not None:
            try:
                parsed = json.loads(context)
            except json.JSONDecodeError as e:
                raise ValidationError(
                    f"Environment variable {prefix}ENCRYPTION_CONTEXT is not valid JSON: {e}"
                ) from e
            if not isinstance(parsed, dict):
                raise ValidationError(
                    f"Environment variable {prefix}ENCRYPTION_CONTEXT must be a JSON object"
                )
            kwargs["encryption_context"] = parsed

        tokens = _read_env(f"{prefix}GRANT_TOKENS")
        if tokens is not None:
            kwargs["grant_tokens"] = [t.strip() for t in tokens.split(",") if t.strip()]

        as_context = _read_env(f"{prefix}DISCRIMINATOR_AS_CONTEXT")
        if as_context is not None:
            kwargs["discriminator_as_context"] = _parse_bool(f"{prefix}DISCRIMINATOR_AS_CONTEXT", as_context)

        hash_context = _read_env(f"{prefix}HASH_DISCRIMINATOR_CONTEXT")
        if hash_context is not None:
            kwargs["hash_discriminator_context"] = _parse_bool(f"{prefix}HASH_DISCRIMINATOR_CONTEXT", hash_context)

        return cls(**kwargs)
