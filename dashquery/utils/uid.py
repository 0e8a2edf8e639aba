import secrets
import string

_FIRST_CHARS = string.ascii_lowercase
_CHARS = string.ascii_lowercase + string.digits

SHORT_UID_LENGTH = 14


def generate_short_uid(length: int = SHORT_UID_LENGTH) -> str:
    """Random short identifier; always starts with a letter."""
    if length < 1:
        raise ValueError("length must be positive")
    head = secrets.choice(_FIRST_CHARS)
    tail = "".join(secrets.choice(_CHARS) for _ in range(length - 1))
    return head + tail
