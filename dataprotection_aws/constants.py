"""Library-wide constants.

These constants centralize values shared by the S3 repository, the KMS
encryptor/decryptor and their configuration objects.
"""


class Constants:

    # S3 repository defaults
    _DEFAULT_KEY_PREFIX: str = "DataProtection-Keys/"
    _DEFAULT_MAX_S3_RETRIEVAL_CONCURRENCY: int = 10
    _DEFAULT_STORAGE_CLASS: str = "STANDARD"
    _DEFAULT_SERVER_SIDE_ENCRYPTION_METHOD: str = "AES256"
    _XML_CONTENT_TYPE: str = "application/xml"
    _XML_KEY_SUFFIX: str = ".xml"
    _GZIP_CONTENT_ENCODING: str = "gzip"
    _FRIENDLY_NAME_METADATA_KEY: str = "xml-repository-friendly-name"
    _STORAGE_CLASSES: frozenset[str] = frozenset({
        "STANDARD",
        "REDUCED_REDUNDANCY",
        "STANDARD_IA",
        "ONEZONE_IA",
        "INTELLIGENT_TIERING",
        "GLACIER",
        "DEEP_ARCHIVE",
        "GLACIER_IR",
    })
    _SERVER_SIDE_ENCRYPTION_METHODS: frozenset[str] = frozenset({
        "AES256",
        "aws:kms",
        "aws:kms:dsse",
    })
    _SERVER_SIDE_ENCRYPTION_CUSTOMER_METHODS: frozenset[str] = frozenset({"AES256"})

    # KMS encryptor
    _DISCRIMINATOR_CONTEXT_KEY: str = "dataprotection:application-discriminator"
    _ENCRYPTED_KEY_ELEMENT: str = "encryptedKey"
    _ENCRYPTED_VALUE_ELEMENT: str = "value"
    _ENCRYPTED_KEY_COMMENT: str = " This key is encrypted with AWS Key Management Service. "

    # Service registry names for boto3 clients
    _S3_CLIENT_SERVICE: str = "s3"
    _KMS_CLIENT_SERVICE: str = "kms"

    @classmethod
    def DEFAULT_KEY_PREFIX(cls) -> str:
        return cls._DEFAULT_KEY_PREFIX

    @classmethod
    def DEFAULT_MAX_S3_RETRIEVAL_CONCURRENCY(cls) -> int:
        return cls._DEFAULT_MAX_S3_RETRIEVAL_CONCURRENCY

    @classmethod
    def DEFAULT_STORAGE_CLASS(cls) -> str:
        return cls._DEFAULT_STORAGE_CLASS

    @classmethod
    def DEFAULT_SERVER_SIDE_ENCRYPTION_METHOD(cls) -> str:
        return cls._DEFAULT_SERVER_SIDE_ENCRYPTION_METHOD

    @classmethod
    def XML_CONTENT_TYPE(cls) -> str:
        return cls._XML_CONTENT_TYPE

    @classmethod
    def XML_KEY_SUFFIX(cls) -> str:
        return cls._XML_KEY_SUFFIX

    @classmethod
    def GZIP_CONTENT_ENCODING(cls) -> str:
        return cls._GZIP_CONTENT_ENCODING

    @classmethod
    def FRIENDLY_NAME_METADATA_KEY(cls) -> str:
        return cls._FRIENDLY_NAME_METADATA_KEY

    @classmethod
    def STORAGE_CLASSES(cls) -> frozenset[str]:
        return cls._STORAGE_CLASSES

    @classmethod
    def SERVER_SIDE_ENCRYPTION_METHODS(cls) -> frozenset[str]:
        return cls._SERVER_SIDE_ENCRYPTION_METHODS

    @classmethod
    def SERVER_SIDE_ENCRYPTION_CUSTOMER_METHODS(cls) -> frozenset[str]:
        return cls._SERVER_SIDE_ENCRYPTION_CUSTOMER_METHODS

    # Encryption context
    @classmethod
    def DISCRIMINATOR_CONTEXT_KEY(cls) -> str:
        return cls._DISCRIMINATOR_CONTEXT_KEY

    @classmethod
    def ENCRYPTED_KEY_ELEMENT(cls) -> str:
        return cls._ENCRYPTED_KEY_ELEMENT

    @classmethod
    def ENCRYPTED_VALUE_ELEMENT(cls) -> str:
        return cls._ENCRYPTED_VALUE_ELEMENT

    @classmethod
    def ENCRYPTED_KEY_COMMENT(cls) -> str:
        return cls._ENCRYPTED_KEY_COMMENT

    @classmethod
    def S3_CLIENT_SERVICE(cls) -> str:
        return cls._S3_CLIENT_SERVICE

    @classmethod
    def KMS_CLIENT_SERVICE(cls) -> str:
        return cls._KMS_CLIENT_SERVICE
