"""Tests for XML helpers."""

import unittest
from xml.etree.ElementTree import Comment, Element, ParseError, SubElement

from dataprotection_aws.xml_utils import compress, decompress, parse_element, serialize_element


class TestXmlUtils(unittest.TestCase):
    """Test cases for xml_utils."""

    def test_serialize_without_declaration(self):
        """Test default serialization has no XML declaration."""
        element = Element("key", id="abc")
        SubElement(element, "value").text = "secret"

        self.assertEqual(serialize_element(element), b'<key id="abc"><value>secret</value></key>')

    def test_serialize_with_declaration(self):
        """Test serialization with an XML declaration."""
        data = serialize_element(Element("key"), xml_declaration=True)

        self.assertTrue(data.startswith(b"<?xml version='1.0' encoding='utf-8'?>"))
        self.assertTrue(data.endswith(b"<key />"))

    def test_parse_keeps_comments(self):
        """Test comments survive parsing."""
        element = parse_element(b"<encryptedKey><!-- note --><value>abc</value></encryptedKey>")

        self.assertEqual(element.tag, "encryptedKey")
        self.assertIs(element[0].tag, Comment)
        self.assertEqual(element[0].text, " note ")
        self.assertEqual(element.find("value").text, "abc")

    def test_parse_accepts_text(self):
        """Test str input is accepted."""
        self.assertEqual(parse_element("<key/>").tag, "key")

    def test_parse_non_ascii(self):
        """Test UTF-8 content round-trips through bytes."""
        element = Element("key")
        element.text = "clé"

        self.assertEqual(parse_element(serialize_element(element, xml_declaration=True)).text, "clé")

    def test_parse_invalid(self):
        """Test malformed XML raises ParseError."""
        with self.assertRaises(ParseError):
            parse_element(b"<key>")

    def test_compression(self):
        """Test gzip helpers."""
        data = b"<key/>" * 100
        compressed = compress(data)

        self.assertEqual(compressed[:2], b"\x1f\x8b")
        self.assertEqual(decompress(compressed), data)


if __name__ == "__main__":
    unittest.main()
