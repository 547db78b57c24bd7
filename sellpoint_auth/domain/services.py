# sellpoint_auth/domain/services.py
from __future__ import annotations

import hmac
import secrets
import string
import uuid

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code(length: int = 6) -> str:
    """Random uppercase alphanumeric code, e.g. 'AB12CD'."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def new_opaque_token() -> str:
    """Unguessable 32-char hex token (reset tokens, access codes, session ids)."""
    return uuid.uuid4().hex


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def codes_match(stored: str, given: str | None) -> bool:
    """Case-insensitive constant-time match of a user-typed code."""
    if given is None:
        return False
    return secure_compare(stored.strip().upper(), given.strip().upper())


def username_from_email(email: str, suffix: str | None = None) -> str:
    """Local part of the address, e.g. 'alice' or 'alice-3f9a' with a suffix."""
    local = email.strip().lower().split("@", 1)[0]
    return f"{local}-{suffix}" if suffix else local
