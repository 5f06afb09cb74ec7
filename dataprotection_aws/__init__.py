"""dataprotection-aws - AWS adapters for a pluggable data protection key ring.

This package persists data protection key XML to Amazon S3 and encrypts
individual keys at rest with AWS KMS.
"""

from dataprotection_aws.builder import DataProtectionBuilder, ServiceCollection, ServiceProvider
from dataprotection_aws.config import DataProtectionOptions, KmsXmlEncryptorConfig, S3XmlRepositoryConfig
from dataprotection_aws.exceptions import (
    DataProtectionAwsError,
    DecryptionError,
    EncryptionError,
    KeyStorageError,
    ServiceResolutionError,
    ValidationError,
)
from dataprotection_aws.interfaces import XmlDecryptor, XmlEncryptor, XmlRepository
from dataprotection_aws.kms_xml_decryptor import KmsXmlDecryptor
from dataprotection_aws.kms_xml_encryptor import KmsXmlEncryptor
from dataprotection_aws.models import EncryptedXmlInfo
from dataprotection_aws.s3_xml_repository import S3XmlRepository

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dataprotection-aws")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "DataProtectionAwsError",
    "DataProtectionBuilder",
    "DataProtectionOptions",
    "DecryptionError",
    "EncryptedXmlInfo",
    "EncryptionError",
    "KeyStorageError",
    "KmsXmlDecryptor",
    "KmsXmlEncryptor",
    "KmsXmlEncryptorConfig",
    "S3XmlRepository",
    "S3XmlRepositoryConfig",
    "ServiceCollection",
    "ServiceProvider",
    "ServiceResolutionError",
    "ValidationError",
    "XmlDecryptor",
    "XmlEncryptor",
    "XmlRepository",
]
