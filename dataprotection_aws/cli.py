#!/usr/bin/env python3
"""Command-line interface for inspecting and managing an S3 key ring."""

import argparse
import dataclasses
import json
import os
import sys
from typing import Any, Optional
from xml.etree.ElementTree import Element, ParseError

from dataprotection_aws.builder import DataProtectionBuilder, ServiceProvider
from dataprotection_aws.config import KmsXmlEncryptorConfig, S3XmlRepositoryConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import (
    DataProtectionAwsError,
    DecryptionError,
    EncryptionError,
    KeyStorageError,
    ValidationError,
)
from dataprotection_aws.interfaces import XmlEncryptor, XmlRepository
from dataprotection_aws.kms_xml_decryptor import KmsXmlDecryptor
from dataprotection_aws.xml_utils import parse_element, serialize_element


class DataProtectionCLI:
    """Command-line interface for the S3 key repository and KMS encryptor."""

    def __init__(self) -> None:
        """Initialize the CLI."""
        self._parser = self._create_parser()
        self._pretty = False

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="dataprotection-aws - Manage data protection keys stored in S3 and protected by KMS",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # List key elements stored in a bucket
  dataprotection-aws -b my-bucket list

  # Store a key element, encrypting it with KMS first
  dataprotection-aws -b my-bucket --kms-key-id alias/dataprotection \\
    store -f key.xml -n key-0a1b2c3d --encrypt

  # Encrypt or decrypt a key element read from stdin
  cat key.xml | dataprotection-aws --kms-key-id alias/dataprotection encrypt -f -
  cat encrypted.xml | dataprotection-aws --kms-key-id alias/dataprotection decrypt -f -

Bucket and KMS settings fall back to the DATAPROTECTION_S3_* and
DATAPROTECTION_KMS_* environment variables.
            """,
        )

        # Global arguments
        parser.add_argument(
            "-b",
            "--bucket",
            help="S3 bucket holding the key ring (default: $DATAPROTECTION_S3_BUCKET)",
        )
        parser.add_argument(
            "-k",
            "--key-prefix",
            help=f"S3 key prefix (default: {Constants.DEFAULT_KEY_PREFIX()})",
        )
        parser.add_argument(
            "--kms-key-id",
            help="KMS key id, ARN or alias (default: $DATAPROTECTION_KMS_KEY_ID)",
        )
        parser.add_argument(
            "-a",
            "--application-name",
            help="Application discriminator added to the KMS encryption context",
        )
        parser.add_argument(
            "-r",
            "--region",
            default=os.getenv("AWS_REGION"),
            help="AWS region (default: $AWS_REGION)",
        )
        parser.add_argument(
            "--endpoint-url",
            help="Override the AWS endpoint, e.g. for a local S3 emulator",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        subparsers.add_parser(
            "list",
            help="List key elements stored in S3",
        )

        store_parser = subparsers.add_parser(
            "store",
            help="Store a key element in S3",
        )
        store_parser.add_argument(
            "-f",
            "--file",
            required=True,
            help="XML file to store ('-' reads stdin)",
        )
        store_parser.add_argument(
            "-n",
            "--name",
            help="Friendly name used for the S3 object key",
        )
        store_parser.add_argument(
            "-e",
            "--encrypt",
            action="store_true",
            help="Encrypt the element with KMS before storing it",
        )

        encrypt_parser = subparsers.add_parser(
            "encrypt",
            help="Encrypt a key element with KMS",
        )
        encrypt_parser.add_argument(
            "-f",
            "--file",
            required=True,
            help="XML file to encrypt ('-' reads stdin)",
        )

        decrypt_parser = subparsers.add_parser(
            "decrypt",
            help="Decrypt a key element with KMS",
        )
        decrypt_parser.add_argument(
            "-f",
            "--file",
            required=True,
            help="Encrypted XML file to decrypt ('-' reads stdin)",
        )

        return parser

    def _build_services(
        self,
        args: argparse.Namespace,
        *,
        needs_s3: bool,
        needs_kms: bool
    ) -> ServiceProvider:
        """Register the clients and adapters a command needs.

        Raises:
            ValidationError: If bucket or KMS settings are missing or invalid
        """
        client_kwargs: dict[str, Any] = {}
        if args.region:
            client_kwargs["region_name"] = args.region
        if args.endpoint_url:
            client_kwargs["endpoint_url"] = args.endpoint_url

        builder = DataProtectionBuilder()
        if args.application_name:
            builder.set_application_name(args.application_name)

        if needs_s3:
            builder.add_aws_client(Constants.S3_CLIENT_SERVICE(), **client_kwargs)
            builder.persist_keys_to_aws_s3(self._s3_config(args))

        if needs_kms:
            builder.add_aws_client(Constants.KMS_CLIENT_SERVICE(), **client_kwargs)
            builder.protect_keys_with_aws_kms(self._kms_config(args))

        return builder.build_service_provider()

    def _s3_config(self, args: argparse.Namespace) -> S3XmlRepositoryConfig:
        """Build the S3 configuration from arguments or the environment."""
        if args.bucket:
            kwargs: dict[str, Any] = {"bucket": args.bucket}
            if args.key_prefix is not None:
                kwargs["key_prefix"] = args.key_prefix
            return S3XmlRepositoryConfig(**kwargs)

        config = S3XmlRepositoryConfig.from_environment()
        if args.key_prefix is not None:
            config = dataclasses.replace(config, key_prefix=args.key_prefix)
        return config

    def _kms_config(self, args: argparse.Namespace) -> KmsXmlEncryptorConfig:
        """Build the KMS configuration from arguments or the environment."""
        if args.kms_key_id:
            return KmsXmlEncryptorConfig(key_id=args.kms_key_id)
        return KmsXmlEncryptorConfig.from_environment()

    def _read_xml(self, path: str) -> Element:
        """Read an XML element from a file or stdin.

        Raises:
            ValidationError: If the file cannot be read or parsed
        """
        try:
            if path == "-":
                content = sys.stdin.buffer.read()
            else:
                # Bytes, so the XML declaration decides the encoding
                with open(path, "rb") as f:
                    content = f.read()
        except FileNotFoundError as e:
            raise ValidationError(f"XML file not found: {e}") from e
        except OSError as e:
            raise ValidationError(f"Failed to read XML file: {e}") from e

        try:
            return parse_element(content)
        except ParseError as e:
            raise ValidationError(f"Invalid XML: {e}") from e

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None))

    def _print_error(self, *, message: str, code: str = "error", extra: dict[str, Any] | None = None) -> None:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        if extra:
            error_obj["data"] = extra
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(1)

    def _handle_list(self, args: argparse.Namespace) -> None:
        """Handle list command."""
        services = self._build_services(args, needs_s3=True, needs_kms=False)
        repository = services.get_required_service(XmlRepository)
        elements = repository.get_all_elements()

        self._print_json({
            "success": True,
            "command": "list",
            "count": len(elements),
            "elements": [
                {"tag": element.tag, "id": element.get("id")}
                for element in elements
            ],
        })

    def _handle_store(self, args: argparse.Namespace) -> None:
        """Handle store command."""
        element = self._read_xml(args.file)
        services = self._build_services(args, needs_s3=True, needs_kms=args.encrypt)

        if args.encrypt:
            encryptor = services.get_required_service(XmlEncryptor)
            element = encryptor.encrypt(element).encrypted_element

        repository = services.get_required_service(XmlRepository)
        key = repository.store_element(element, args.name)

        self._print_json({
            "success": True,
            "command": "store",
            "key": key,
            "encrypted": bool(args.encrypt),
        })

    def _handle_encrypt(self, args: argparse.Namespace) -> None:
        """Handle encrypt command."""
        element = self._read_xml(args.file)
        services = self._build_services(args, needs_s3=False, needs_kms=True)
        info = services.get_required_service(XmlEncryptor).encrypt(element)

        self._print_json({
            "success": True,
            "command": "encrypt",
            "decryptor_type": info.decryptor_type.__name__,
            "xml": serialize_element(info.encrypted_element).decode("utf-8"),
        })

    def _handle_decrypt(self, args: argparse.Namespace) -> None:
        """Handle decrypt command."""
        element = self._read_xml(args.file)
        services = self._build_services(args, needs_s3=False, needs_kms=True)

        # Activated the same way the key manager activates a recorded decryptor type
        decryptor = services.activate(KmsXmlDecryptor)
        plaintext = decryptor.decrypt(element)

        self._print_json({
            "success": True,
            "command": "decrypt",
            "xml": serialize_element(plaintext).decode("utf-8"),
        })

    def run(self, args: Optional[list[str]] = None) -> None:
        """Run the CLI with given arguments."""
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")

            if parsed_args.command == "list":
                self._handle_list(parsed_args)
            elif parsed_args.command == "store":
                self._handle_store(parsed_args)
            elif parsed_args.command == "encrypt":
                self._handle_encrypt(parsed_args)
            elif parsed_args.command == "decrypt":
                self._handle_decrypt(parsed_args)
            else:
                self._print_error(message=f"Unknown command: {parsed_args.command}", code="unknown_command")

        except ValidationError as e:
            self._print_error(message=str(e), code="validation_error")
        except KeyStorageError as e:
            self._print_error(message=str(e), code="storage_error")
        except EncryptionError as e:
            self._print_error(message=str(e), code="encryption_error")
        except DecryptionError as e:
            self._print_error(message=str(e), code="decryption_error")
        except DataProtectionAwsError as e:
            self._print_error(message=str(e), code="error")
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            self._print_error(message=str(e), code="unexpected_error")


def main() -> None:
    """Main entry point for the CLI."""
    cli = DataProtectionCLI()
    cli.run()


if __name__ == "__main__":
    main()
