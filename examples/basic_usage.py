#!/usr/bin/env python3
"""Example usage of the S3 key repository with KMS key encryption.

Requires AWS credentials, an existing bucket and a KMS key:

    DATAPROTECTION_S3_BUCKET=my-bucket \\
    DATAPROTECTION_KMS_KEY_ID=alias/dataprotection \\
    python examples/basic_usage.py
"""

import base64
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from xml.etree.ElementTree import Element, SubElement

from dataprotection_aws import (
    DataProtectionBuilder,
    KmsXmlEncryptorConfig,
    S3XmlRepositoryConfig,
    XmlEncryptor,
    XmlRepository,
)


def create_key_element() -> Element:
    """Build a key element shaped like a key ring entry."""
    now = datetime.now(timezone.utc)
    key = Element("key", {"id": str(uuid.uuid4()), "version": "1"})
    SubElement(key, "creationDate").text = now.isoformat()
    SubElement(key, "activationDate").text = now.isoformat()
    SubElement(key, "expirationDate").text = (now + timedelta(days=90)).isoformat()
    descriptor = SubElement(key, "descriptor")
    master_key = SubElement(descriptor, "masterKey")
    SubElement(master_key, "value").text = base64.b64encode(os.urandom(64)).decode("ascii")
    return key


def main():
    """Store an encrypted key, then read the key ring back."""
    logging.basicConfig(level=logging.INFO)

    s3_config = S3XmlRepositoryConfig.from_environment()
    kms_config = KmsXmlEncryptorConfig.from_environment()
    region = os.getenv("AWS_REGION")
    client_kwargs = {"region_name": region} if region else {}

    services = (
        DataProtectionBuilder()
        .set_application_name("basic-usage-example")
        .add_aws_client("s3", **client_kwargs)
        .add_aws_client("kms", **client_kwargs)
        .persist_keys_to_aws_s3(s3_config)
        .protect_keys_with_aws_kms(kms_config)
        .build_service_provider()
    )

    repository = services.get_required_service(XmlRepository)
    encryptor = services.get_required_service(XmlEncryptor)

    key = create_key_element()
    print(f"Created key {key.get('id')}")

    info = encryptor.encrypt(key)
    repository.store_element(info.encrypted_element, f"key-{key.get('id')}")
    print(f"Stored encrypted key in s3://{s3_config.bucket}/{s3_config.key_prefix}")

    decryptor = services.activate(info.decryptor_type)
    for element in repository.get_all_elements():
        if element.tag == "encryptedKey":
            element = decryptor.decrypt(element)
        print(f"Key ring entry: {element.tag} id={element.get('id')}")


if __name__ == "__main__":
    main()
