"""Tests for data models."""

import dataclasses
import unittest
from xml.etree.ElementTree import Element

from dataprotection_aws.exceptions import ValidationError
from dataprotection_aws.interfaces import XmlDecryptor
from dataprotection_aws.kms_xml_decryptor import KmsXmlDecryptor
from dataprotection_aws.models import EncryptedXmlInfo


class TestEncryptedXmlInfo(unittest.TestCase):
    """Test cases for EncryptedXmlInfo."""

    def test_valid_info(self):
        """Test construction with an element and decryptor type."""
        element = Element("encryptedKey")
        info = EncryptedXmlInfo(element, KmsXmlDecryptor)

        self.assertIs(info.encrypted_element, element)
        self.assertIs(info.decryptor_type, KmsXmlDecryptor)
        self.assertTrue(issubclass(info.decryptor_type, XmlDecryptor))

    def test_is_immutable(self):
        """Test fields cannot be reassigned."""
        info = EncryptedXmlInfo(Element("encryptedKey"), KmsXmlDecryptor)

        with self.assertRaises(dataclasses.FrozenInstanceError):
            info.decryptor_type = XmlDecryptor

    def test_none_element(self):
        """Test None element is rejected."""
        with self.assertRaises(ValidationError) as cm:
            EncryptedXmlInfo(None, KmsXmlDecryptor)
        self.assertIn("Encrypted element cannot be None", str(cm.exception))

    def test_none_decryptor_type(self):
        """Test None decryptor type is rejected."""
        with self.assertRaises(ValidationError) as cm:
            EncryptedXmlInfo(Element("encryptedKey"), None)
        self.assertIn("Decryptor type cannot be None", str(cm.exception))

    def test_decryptor_type_must_be_decryptor(self):
        """Test non-decryptor types are rejected."""
        for decryptor_type in (str, KmsXmlDecryptor.__name__):
            with self.subTest(decryptor_type=decryptor_type):
                with self.assertRaises(ValidationError):
                    EncryptedXmlInfo(Element("encryptedKey"), decryptor_type)


if __name__ == "__main__":
    unittest.main()
