"""
Storage key generation.

Keys look like "<owner_id>/<token>_<sanitized name>". The owner segment comes
first so storage access policies can scope objects by prefix.
"""

import re
import uuid
from typing import Callable

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(original_name: str) -> str:
    """Replaces whitespace runs with '_' and drops anything outside [A-Za-z0-9._-]."""
    return _UNSAFE.sub("", _WHITESPACE.sub("_", original_name or ""))


def random_token() -> str:
    return str(uuid.uuid4())


def make_key(owner_id: str, original_name: str, token_source: Callable[[], str] = random_token) -> str:
    """Builds a user-scoped, collision-resistant storage key."""
    if not owner_id:
        raise ValueError("owner_id is required to build a storage key")
    return f"{owner_id}/{token_source()}_{sanitize_filename(original_name)}"


def strip_owner(key: str) -> str:
    """Returns the key without its leading owner segment."""
    return "/".join(key.split("/")[1:])
