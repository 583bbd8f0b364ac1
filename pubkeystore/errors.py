"""
pubkeystore.errors
------------------
Exception hierarchy shared by the key store, the PEM codec and the archives.
Every error derives from PublicKeyStoreError and, where one fits, from the
matching builtin so callers can catch either.
"""


class PublicKeyStoreError(Exception):
    pass


class InvalidArgument(PublicKeyStoreError, ValueError):
    """Empty alias, missing key, or an alias that cannot be archived."""


class InvalidPath(PublicKeyStoreError, ValueError):
    """Archive path is not a usable file-system path."""


class ArchiveIOError(PublicKeyStoreError, OSError):
    """Read/write failure, including a corrupt zip container."""


class ArchiveFileNotFound(ArchiveIOError, FileNotFoundError):
    pass


class MalformedKeyFormat(PublicKeyStoreError, ValueError):
    """PEM framing, base64 body or DER key encoding is invalid."""


class UnsupportedAlgorithm(PublicKeyStoreError):
    pass
