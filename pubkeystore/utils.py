"""
pubkeystore.utils
-----------------
Small helpers for base64 and hashing used by the codec and the key records.
"""

from __future__ import annotations
import base64, binascii, hashlib, re

_WHITESPACE = re.compile(r"\s+")


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def b64d(s: str) -> bytes:
    # Rejects anything outside the base64 alphabet instead of silently dropping it
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"invalid base64: {e}") from e


def strip_whitespace(s: str) -> str:
    return _WHITESPACE.sub("", s)


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
