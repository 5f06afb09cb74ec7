"""Custom exceptions for the AWS data protection adapters."""


class DataProtectionAwsError(Exception):
    """Base exception for all AWS data protection errors."""


class ValidationError(DataProtectionAwsError):
    """Raised when arguments or configuration fail validation."""


class KeyStorageError(DataProtectionAwsError):
    """Raised when reading or writing key XML in S3 fails."""


class EncryptionError(DataProtectionAwsError):
    """Raised when KMS encryption of a key element fails."""


class DecryptionError(DataProtectionAwsError):
    """Raised when KMS decryption of a key element fails."""


class ServiceResolutionError(DataProtectionAwsError):
    """Raised when a required service is not registered."""
