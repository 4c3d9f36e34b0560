"""Storage key generation for uploaded images."""

import secrets
import string
import time

DEFAULT_EXTENSION = "jpg"
TOKEN_LENGTH = 6
_TOKEN_ALPHABET = string.digits + string.ascii_lowercase


def file_extension(filename: str) -> str:
    """Lower-cased extension after the last dot, without the dot ('' if none)."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].strip().lower()


def replace_extension(filename: str, extension: str) -> str:
    base = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{base or 'image'}.{extension}"


def generate_storage_key(original_name: str) -> str:
    """Return '<epoch-millis>-<6-char-token>.<ext>' for an uploaded file."""
    timestamp = int(time.time() * 1000)
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))
    ext = file_extension(original_name)
    if not ext.isalnum():
        ext = DEFAULT_EXTENSION
    return f"{timestamp}-{token}.{ext}"
