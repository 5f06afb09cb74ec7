"""Encryption context shared by the KMS encryptor and decryptor."""

import base64
from typing import Any, Optional

from cryptography.hazmat.primitives import hashes

from dataprotection_aws.config import DataProtectionOptions, KmsXmlEncryptorConfig
from dataprotection_aws.constants import Constants


def resolve_application_discriminator(services: Any) -> Optional[str]:
    """Look up the application discriminator from a service provider.

    Args:
        services: Optional ServiceProvider

    Returns:
        The configured discriminator, or None
    """
    if services is None:
        return None
    options = services.get_service(DataProtectionOptions)
    if options is None:
        return None
    return options.application_discriminator


def hash_discriminator(discriminator: str) -> str:
    """Return the base64 SHA-256 digest of a discriminator."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(discriminator.encode("utf-8"))
    return base64.b64encode(digest.finalize()).decode("ascii")


def build_encryption_context(
    config: KmsXmlEncryptorConfig,
    discriminator: Optional[str]
) -> dict[str, str]:
    """Build the KMS encryption context for a key element.

    The configured context is extended with the application discriminator
    when ``discriminator_as_context`` is set and a discriminator is known, so
    that ciphertext from one application cannot be decrypted by another.

    Args:
        config: KMS encryptor configuration
        discriminator: Application discriminator, if any

    Returns:
        Encryption context mapping
    """
    context = dict(config.encryption_context)

    if config.discriminator_as_context and discriminator:
        if config.hash_discriminator_context:
            value = hash_discriminator(discriminator)
        else:
            value = discriminator
        context[Constants.DISCRIMINATOR_CONTEXT_KEY()] = value

    return context


def build_kms_request(
    config: KmsXmlEncryptorConfig,
    discriminator: Optional[str]
) -> dict[str, Any]:
    """Build the parameters common to KMS encrypt and decrypt calls.

    Empty encryption contexts and grant token lists are left out.
    """
    request: dict[str, Any] = {"KeyId": config.key_id}

    context = build_encryption_context(config, discriminator)
    if context:
        request["EncryptionContext"] = context

    if config.grant_tokens:
        request["GrantTokens"] = list(config.grant_tokens)

    return request
