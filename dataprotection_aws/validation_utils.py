"""Validation utilities for the data protection adapters."""

import re
from typing import Any

from dataprotection_aws.exceptions import ValidationError

# Characters S3 documents as safe in object key names
_SAFE_KEY_NAME = re.compile(r"^[A-Za-z0-9!\-_.*'()]+$")
_SAFE_KEY_PREFIX = re.compile(r"^[A-Za-z0-9!\-_.*'()/]+$")


def require_not_none(value: Any, name: str) -> None:
    """Raise if a required argument is None.

    Args:
        value: Argument value
        name: Argument name used in the error message

    Raises:
        ValidationError: If value is None
    """
    if value is None:
        raise ValidationError(f"{name} cannot be None")


def validate_not_blank(value: str | None, name: str) -> None:
    """Validate that a string argument carries content.

    Args:
        value: String value to validate
        name: Argument name used in the error message

    Raises:
        ValidationError: If value is None, empty or whitespace only
    """
    require_not_none(value, name)

    if value == "":
        raise ValidationError(f"{name} cannot be empty")

    if value.strip() == "":
        raise ValidationError(f"{name} cannot contain only whitespace")


def is_safe_s3_key_name(name: str | None) -> bool:
    """Check whether a name can be used verbatim as part of an S3 key.

    Args:
        name: Candidate name, such as a friendly name for a stored element

    Returns:
        True if every character is S3-safe and the name is not a relative
        path component, False otherwise
    """
    if not name:
        return False
    if name in (".", ".."):
        return False
    return _SAFE_KEY_NAME.match(name) is not None


def validate_key_prefix(prefix: str | None) -> None:
    """Validate an S3 key prefix.

    An empty prefix stores keys at the bucket root. Any other prefix must use
    S3-safe characters, end with a slash and not start with one.

    Args:
        prefix: Key prefix to validate

    Raises:
        ValidationError: If the prefix is not usable
    """
    require_not_none(prefix, "Key prefix")

    if prefix == "":
        return

    if not _SAFE_KEY_PREFIX.match(prefix):
        raise ValidationError(f"Key prefix contains characters that are not S3-safe: {prefix!r}")

    if prefix.startswith("/"):
        raise ValidationError("Key prefix cannot start with '/'")

    if not prefix.endswith("/"):
        raise ValidationError("Key prefix must end with '/'")

    if "//" in prefix:
        raise ValidationError("Key prefix cannot contain empty path segments")
