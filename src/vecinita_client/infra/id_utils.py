"""Prefixed ID generation.

Client-generated IDs use a ``{prefix}_{random}`` format so they can be told
apart from gateway-assigned ones at a glance:

- ``thread_a8Kx3nQ9mP2r``: conversation thread pinned by the client
"""

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits  # a-z A-Z 0-9
_DEFAULT_LENGTH = 12  # ~71 bits of entropy

THREAD_PREFIX = "thread"


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Generate a prefixed random ID.

    Args:
        prefix: Short descriptor (e.g. ``"thread"``).
        length: Number of random alphanumeric characters after the prefix.

    Returns:
        ``"{prefix}_{random}"`` string.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"


def generate_thread_id() -> str:
    """Return a fresh thread ID for starting a conversation client-side."""
    return generate_id(THREAD_PREFIX)
