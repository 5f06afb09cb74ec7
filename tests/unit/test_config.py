"""Tests for configuration objects."""

import os
import unittest
from unittest.mock import patch

from dataprotection_aws.config import DataProtectionOptions, KmsXmlEncryptorConfig, S3XmlRepositoryConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import ValidationError


class TestS3XmlRepositoryConfig(unittest.TestCase):
    """Test cases for S3XmlRepositoryConfig."""

    def test_defaults(self):
        """Test default values."""
        config = S3XmlRepositoryConfig(bucket="bucket")

        self.assertEqual(config.key_prefix, "DataProtection-Keys/")
        self.assertEqual(config.max_s3_retrieval_concurrency, 10)
        self.assertEqual(config.storage_class, "STANDARD")
        self.assertEqual(config.server_side_encryption_method, "AES256")
        self.assertIsNone(config.server_side_encryption_kms_key_id)
        self.assertIsNone(config.server_side_encryption_customer_method)
        self.assertTrue(config.client_side_compression)
        self.assertFalse(config.uses_customer_key)

    def test_bucket_required(self):
        """Test bucket validation."""
        for bucket, message in ((None, "cannot be None"), ("", "cannot be empty"), ("   ", "only whitespace")):
            with self.subTest(bucket=bucket):
                with self.assertRaises(ValidationError) as cm:
                    S3XmlRepositoryConfig(bucket=bucket)
                self.assertIn(message, str(cm.exception))

    def test_invalid_key_prefix(self):
        """Test key prefix validation is applied."""
        with self.assertRaises(ValidationError):
            S3XmlRepositoryConfig(bucket="bucket", key_prefix="no-trailing-slash")

    def test_empty_key_prefix_allowed(self):
        """Test keys can be stored at the bucket root."""
        config = S3XmlRepositoryConfig(bucket="bucket", key_prefix="")
        self.assertEqual(config.key_prefix, "")

    def test_concurrency_must_be_positive(self):
        """Test max_s3_retrieval_concurrency validation."""
        with self.assertRaises(ValidationError) as cm:
            S3XmlRepositoryConfig(bucket="bucket", max_s3_retrieval_concurrency=0)
        self.assertIn("at least 1", str(cm.exception))

    def test_storage_class_validation(self):
        """Test unknown storage classes are rejected."""
        S3XmlRepositoryConfig(bucket="bucket", storage_class="STANDARD_IA")

        with self.assertRaises(ValidationError) as cm:
            S3XmlRepositoryConfig(bucket="bucket", storage_class="COLD")
        self.assertIn("Unsupported S3 storage class", str(cm.exception))

    def test_server_side_encryption_method_validation(self):
        """Test server-side encryption method validation."""
        S3XmlRepositoryConfig(bucket="bucket", server_side_encryption_method=None)
        S3XmlRepositoryConfig(bucket="bucket", server_side_encryption_method="aws:kms")

        with self.assertRaises(ValidationError):
            S3XmlRepositoryConfig(bucket="bucket", server_side_encryption_method="DES")

    def test_kms_key_id_requires_kms_method(self):
        """Test SSE-KMS key id needs an aws:kms method."""
        config = S3XmlRepositoryConfig(
            bucket="bucket",
            server_side_encryption_method="aws:kms",
            server_side_encryption_kms_key_id="alias/s3",
        )
        self.assertEqual(config.server_side_encryption_kms_key_id, "alias/s3")

        with self.assertRaises(ValidationError) as cm:
            S3XmlRepositoryConfig(bucket="bucket", server_side_encryption_kms_key_id="alias/s3")
        self.assertIn("requires an aws:kms", str(cm.exception))

    def test_customer_key_configuration(self):
        """Test SSE-C settings."""
        config = S3XmlRepositoryConfig(
            bucket="bucket",
            server_side_encryption_method=None,
            server_side_encryption_customer_method="AES256",
            server_side_encryption_customer_key="k" * 32,
        )
        self.assertTrue(config.uses_customer_key)

    def test_customer_key_excludes_server_side_method(self):
        """Test SSE-C cannot be combined with SSE-S3 or SSE-KMS."""
        with self.assertRaises(ValidationError) as cm:
            S3XmlRepositoryConfig(
                bucket="bucket",
                server_side_encryption_customer_method="AES256",
                server_side_encryption_customer_key="k" * 32,
            )
        self.assertIn("must be None", str(cm.exception))

    def test_customer_method_requires_key(self):
        """Test SSE-C method needs a key."""
        with self.assertRaises(ValidationError) as cm:
            S3XmlRepositoryConfig(
                bucket="bucket",
                server_side_encryption_method=None,
                server_side_encryption_customer_method="AES256",
            )
        self.assertIn("customer_key is required", str(cm.exception))

    def test_customer_key_requires_method(self):
        """Test a customer key without a method is rejected."""
        with self.assertRaises(ValidationError):
            S3XmlRepositoryConfig(bucket="bucket", server_side_encryption_customer_key="k" * 32)

    def test_unsupported_customer_method(self):
        """Test unknown SSE-C algorithms are rejected."""
        with self.assertRaises(ValidationError):
            S3XmlRepositoryConfig(
                bucket="bucket",
                server_side_encryption_method=None,
                server_side_encryption_customer_method="AES128",
                server_side_encryption_customer_key="k" * 32,
            )


class TestS3XmlRepositoryConfigFromEnvironment(unittest.TestCase):
    """Test cases for S3XmlRepositoryConfig.from_environment."""

    def test_minimal_environment(self):
        """Test only the bucket is required."""
        with patch.dict(os.environ, {"DATAPROTECTION_S3_BUCKET": "env-bucket"}, clear=True):
            config = S3XmlRepositoryConfig.from_environment()

        self.assertEqual(config.bucket, "env-bucket")
        self.assertEqual(config.key_prefix, Constants.DEFAULT_KEY_PREFIX())

    def test_full_environment(self):
        """Test every supported variable."""
        env = {
            "APP_BUCKET": "env-bucket",
            "APP_KEY_PREFIX": "web/keys/",
            "APP_MAX_RETRIEVAL_CONCURRENCY": "4",
            "APP_STORAGE_CLASS": "STANDARD_IA",
            "APP_SSE_METHOD": "aws:kms",
            "APP_SSE_KMS_KEY_ID": "alias/s3",
            "APP_CLIENT_SIDE_COMPRESSION": "false",
        }
        with patch.dict(os.environ, env, clear=True):
            config = S3XmlRepositoryConfig.from_environment(prefix="APP_")

        self.assertEqual(config.bucket, "env-bucket")
        self.assertEqual(config.key_prefix, "web/keys/")
        self.assertEqual(config.max_s3_retrieval_concurrency, 4)
        self.assertEqual(config.storage_class, "STANDARD_IA")
        self.assertEqual(config.server_side_encryption_method, "aws:kms")
        self.assertEqual(config.server_side_encryption_kms_key_id, "alias/s3")
        self.assertFalse(config.client_side_compression)

    def test_sse_method_none(self):
        """Test server-side encryption can be disabled."""
        env = {"DATAPROTECTION_S3_BUCKET": "b", "DATAPROTECTION_S3_SSE_METHOD": "none"}
        with patch.dict(os.environ, env, clear=True):
            config = S3XmlRepositoryConfig.from_environment()

        self.assertIsNone(config.server_side_encryption_method)

    def test_missing_bucket(self):
        """Test missing bucket variable."""
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError) as cm:
                S3XmlRepositoryConfig.from_environment()

        self.assertIn("DATAPROTECTION_S3_BUCKET not set", str(cm.exception))

    def test_whitespace_bucket(self):
        """Test whitespace-only bucket variable is treated as unset."""
        with patch.dict(os.environ, {"DATAPROTECTION_S3_BUCKET": "   "}, clear=True):
            with self.assertRaises(ValidationError):
                S3XmlRepositoryConfig.from_environment()

    def test_invalid_concurrency(self):
        """Test non-integer concurrency."""
        env = {"DATAPROTECTION_S3_BUCKET": "b", "DATAPROTECTION_S3_MAX_RETRIEVAL_CONCURRENCY": "many"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError) as cm:
                S3XmlRepositoryConfig.from_environment()

        self.assertIn("must be an integer", str(cm.exception))

    def test_invalid_boolean(self):
        """Test malformed boolean variable."""
        env = {"DATAPROTECTION_S3_BUCKET": "b", "DATAPROTECTION_S3_CLIENT_SIDE_COMPRESSION": "maybe"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError) as cm:
                S3XmlRepositoryConfig.from_environment()

        self.assertIn("must be a boolean", str(cm.exception))

    def test_none_prefix(self):
        """Test None prefix is rejected."""
        with self.assertRaises(ValidationError):
            S3XmlRepositoryConfig.from_environment(prefix=None)


class TestKmsXmlEncryptorConfig(unittest.TestCase):
    """Test cases for KmsXmlEncryptorConfig."""

    def test_defaults(self):
        """Test default values."""
        config = KmsXmlEncryptorConfig(key_id="alias/key")

        self.assertEqual(config.encryption_context, {})
        self.assertEqual(config.grant_tokens, [])
        self.assertTrue(config.discriminator_as_context)
        self.assertTrue(config.hash_discriminator_context)

    def test_key_id_required(self):
        """Test key id validation."""
        for key_id in (None, "", "  "):
            with self.subTest(key_id=key_id):
                with self.assertRaises(ValidationError):
                    KmsXmlEncryptorConfig(key_id=key_id)

    def test_context_and_tokens_are_copied(self):
        """Test later changes to caller-owned collections do not leak in."""
        context = {"purpose": "dataprotection"}
        tokens = ["grant-1"]
        config = KmsXmlEncryptorConfig(key_id="alias/key", encryption_context=context, grant_tokens=tokens)

        context["purpose"] = "changed"
        tokens.append("grant-2")

        self.assertEqual(config.encryption_context, {"purpose": "dataprotection"})
        self.assertEqual(config.grant_tokens, ["grant-1"])

    def test_none_collections_rejected(self):
        """Test None context or tokens are rejected."""
        with self.assertRaises(ValidationError):
            KmsXmlEncryptorConfig(key_id="alias/key", encryption_context=None)
        with self.assertRaises(ValidationError):
            KmsXmlEncryptorConfig(key_id="alias/key", grant_tokens=None)

    def test_context_values_must_be_strings(self):
        """Test non-string context values are rejected."""
        with self.assertRaises(ValidationError):
            KmsXmlEncryptorConfig(key_id="alias/key", encryption_context={"version": 1})

    def test_reserved_context_key(self):
        """Test the discriminator context key cannot be set directly."""
        with self.assertRaises(ValidationError) as cm:
            KmsXmlEncryptorConfig(
                key_id="alias/key",
                encryption_context={Constants.DISCRIMINATOR_CONTEXT_KEY(): "value"},
            )
        self.assertIn("is reserved", str(cm.exception))

    def test_blank_grant_token(self):
        """Test blank grant tokens are rejected."""
        with self.assertRaises(ValidationError):
            KmsXmlEncryptorConfig(key_id="alias/key", grant_tokens=["  "])


class TestKmsXmlEncryptorConfigFromEnvironment(unittest.TestCase):
    """Test cases for KmsXmlEncryptorConfig.from_environment."""

    def test_full_environment(self):
        """Test every supported variable."""
        env = {
            "DATAPROTECTION_KMS_KEY_ID": "alias/env-key",
            "DATAPROTECTION_KMS_ENCRYPTION_CONTEXT": '{"purpose": "dataprotection"}',
            "DATAPROTECTION_KMS_GRANT_TOKENS": "grant-1, grant-2,,",
            "DATAPROTECTION_KMS_DISCRIMINATOR_AS_CONTEXT": "yes",
            "DATAPROTECTION_KMS_HASH_DISCRIMINATOR_CONTEXT": "0",
        }
        with patch.dict(os.environ, env, clear=True):
            config = KmsXmlEncryptorConfig.from_environment()

        self.assertEqual(config.key_id, "alias/env-key")
        self.assertEqual(config.encryption_context, {"purpose": "dataprotection"})
        self.assertEqual(config.grant_tokens, ["grant-1", "grant-2"])
        self.assertTrue(config.discriminator_as_context)
        self.assertFalse(config.hash_discriminator_context)

    def test_missing_key_id(self):
        """Test missing key id variable."""
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError) as cm:
                KmsXmlEncryptorConfig.from_environment()

        self.assertIn("DATAPROTECTION_KMS_KEY_ID not set", str(cm.exception))

    def test_invalid_context_json(self):
        """Test malformed context JSON."""
        env = {"DATAPROTECTION_KMS_KEY_ID": "k", "DATAPROTECTION_KMS_ENCRYPTION_CONTEXT": "{not json"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError) as cm:
                KmsXmlEncryptorConfig.from_environment()

        self.assertIn("not valid JSON", str(cm.exception))

    def test_context_must_be_object(self):
        """Test context JSON must be an object."""
        env = {"DATAPROTECTION_KMS_KEY_ID": "k", "DATAPROTECTION_KMS_ENCRYPTION_CONTEXT": '["a"]'}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError) as cm:
                KmsXmlEncryptorConfig.from_environment()

        self.assertIn("must be a JSON object", str(cm.exception))


class TestDataProtectionOptions(unittest.TestCase):
    """Test cases for DataProtectionOptions."""

    def test_default_discriminator(self):
        """Test no discriminator by default."""
        self.assertIsNone(DataProtectionOptions().application_discriminator)


if __name__ == "__main__":
    unittest.main()
