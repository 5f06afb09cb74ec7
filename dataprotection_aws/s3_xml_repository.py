"""XML repository that persists the data protection key ring to Amazon S3."""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from xml.etree.ElementTree import Element, ParseError

from botocore.exceptions import BotoCoreError, ClientError

from dataprotection_aws.config import S3XmlRepositoryConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import KeyStorageError
from dataprotection_aws.interfaces import XmlRepository
from dataprotection_aws.validation_utils import is_safe_s3_key_name, require_not_none
from dataprotection_aws.xml_utils import compress, decompress, parse_element, serialize_element

logger = logging.getLogger(__name__)


class S3XmlRepository(XmlRepository):
    """Stores key XML elements as individual objects under an S3 key prefix."""

    def __init__(self, s3_client: Any, config: S3XmlRepositoryConfig) -> None:
        """Initialize the repository.

        Args:
            s3_client: boto3 S3 client configured with appropriate credentials
            config: Configuration specifying how to read and write S3 objects

        Raises:
            ValidationError: If s3_client or config is None
        """
        require_not_none(s3_client, "S3 client")
        require_not_none(config, "S3 repository config")

        self._s3_client = s3_client
        self._config = config

    @property
    def config(self) -> S3XmlRepositoryConfig:
        """Get the repository configuration."""
        return self._config

    @property
    def s3_client(self) -> Any:
        """Get the S3 client."""
        return self._s3_client

    def get_all_elements(self) -> tuple[Element, ...]:
        """Read every key element stored under the configured prefix.

        Objects are fetched concurrently, bounded by
        ``max_s3_retrieval_concurrency``, and returned in listing order.

        Returns:
            Tuple of parsed XML elements

        Raises:
            KeyStorageError: If listing, fetching or parsing fails
        """
        keys = self._list_keys()
        logger.debug(f"Found {len(keys)} key objects in s3://{self._config.bucket}/{self._config.key_prefix}")

        if not keys:
            return ()

        workers = min(self._config.max_s3_retrieval_concurrency, len(keys))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="s3-xml-repository") as executor:
            elements = tuple(executor.map(self._get_element, keys))

        logger.info(f"Loaded {len(elements)} key elements from S3 bucket {self._config.bucket}")
        return elements

    def store_element(self, element: Element, friendly_name: str | None) -> str:
        """Write a key element to S3.

        The object is named after the friendly name when it is S3-safe,
        otherwise after a new random identifier.

        Args:
            element: Element to store
            friendly_name: Optional name hint for the object key

        Returns:
            The S3 object key written

        Raises:
            ValidationError: If element is None
            KeyStorageError: If the upload fails
        """
        require_not_none(element, "Element")

        if is_safe_s3_key_name(friendly_name):
            name = friendly_name
        else:
            name = str(uuid.uuid4())
            if friendly_name:
                logger.debug(f"Friendly name {friendly_name!r} is not S3-safe, using {name} instead")

        key = f"{self._config.key_prefix}{name}{Constants.XML_KEY_SUFFIX()}"
        body = serialize_element(element, xml_declaration=True)

        request: dict[str, Any] = {
            "Bucket": self._config.bucket,
            "Key": key,
            "ContentType": Constants.XML_CONTENT_TYPE(),
            "StorageClass": self._config.storage_class,
        }

        if self._config.client_side_compression:
            body = compress(body)
            request["ContentEncoding"] = Constants.GZIP_CONTENT_ENCODING()

        request["Body"] = body

        if name == friendly_name:
            request["Metadata"] = {Constants.FRIENDLY_NAME_METADATA_KEY(): friendly_name}

        if self._config.server_side_encryption_method is not None:
            request["ServerSideEncryption"] = self._config.server_side_encryption_method
            if self._config.server_side_encryption_kms_key_id is not None:
                request["SSEKMSKeyId"] = self._config.server_side_encryption_kms_key_id

        request.update(self._customer_key_parameters())

        try:
            self._s3_client.put_object(**request)
        except (BotoCoreError, ClientError) as e:
            raise KeyStorageError(f"Failed to store key element at s3://{self._config.bucket}/{key}: {e}") from e

        logger.info(f"Stored key element at s3://{self._config.bucket}/{key}", extra={
            "bucket": self._config.bucket,
            "key": key,
            "event": "key_element_stored"
        })
        return key

    def _list_keys(self) -> list[str]:
        """List the object keys under the configured prefix.

        Returns:
            Object keys in listing order, excluding directory markers

        Raises:
            KeyStorageError: If listing fails
        """
        keys = []
        try:
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._config.bucket, Prefix=self._config.key_prefix):
                for item in page.get("Contents", []):
                    key = item["Key"]
                    if key.endswith("/"):
                        continue
                    keys.append(key)
        except (BotoCoreError, ClientError) as e:
            raise KeyStorageError(f"Failed to list key elements in bucket {self._config.bucket}: {e}") from e
        return keys

    def _get_element(self, key: str) -> Element:
        """Fetch and parse a single key object.

        Args:
            key: Object key to fetch

        Returns:
            Parsed XML element

        Raises:
            KeyStorageError: If fetching or parsing fails
        """
        request = {"Bucket": self._config.bucket, "Key": key}
        request.update(self._customer_key_parameters())

        try:
            response = self._s3_client.get_object(**request)
            body = response["Body"]
            try:
                data = body.read()
            finally:
                body.close()
        except (BotoCoreError, ClientError) as e:
            raise KeyStorageError(f"Failed to read key element s3://{self._config.bucket}/{key}: {e}") from e

        if response.get("ContentEncoding") == Constants.GZIP_CONTENT_ENCODING():
            try:
                data = decompress(data)
            except (OSError, EOFError) as e:
                raise KeyStorageError(f"Failed to decompress key element {key}: {e}") from e

        try:
            return parse_element(data)
        except ParseError as e:
            raise KeyStorageError(f"Key element {key} is not valid XML: {e}") from e

    def _customer_key_parameters(self) -> dict[str, str]:
        """Build the SSE-C request parameters, empty when not configured."""
        if not self._config.uses_customer_key:
            return {}

        params = {
            "SSECustomerAlgorithm": self._config.server_side_encryption_customer_method,
            "SSECustomerKey": self._config.server_side_encryption_customer_key,
        }
        if self._config.server_side_encryption_customer_key_md5:
            params["SSECustomerKeyMD5"] = self._config.server_side_encryption_customer_key_md5
        return params
