"""
pubkeystore
===========
Named collections of public keys, persisted as PEM blocks inside a zip file.

Provides:
- PublicKeyStore: thread-safe alias -> key map with change tracking
- PEM codec for DER SubjectPublicKeyInfo keys
- ZipArchive / MemoryArchive persistence backends
"""

from .errors import (
    PublicKeyStoreError,
    InvalidArgument,
    InvalidPath,
    ArchiveIOError,
    ArchiveFileNotFound,
    MalformedKeyFormat,
    UnsupportedAlgorithm,
)
from .storage import (
    PublicKeyRecord,
    PublicKeyStore,
    ArchiveProvider,
    MemoryArchive,
    MEMORY,
    ZipArchive,
    load_archive_provider,
)

__all__ = [
    "PublicKeyStoreError",
    "InvalidArgument",
    "InvalidPath",
    "ArchiveIOError",
    "ArchiveFileNotFound",
    "MalformedKeyFormat",
    "UnsupportedAlgorithm",
    "PublicKeyRecord",
    "PublicKeyStore",
    "ArchiveProvider",
    "MemoryArchive",
    "MEMORY",
    "ZipArchive",
    "load_archive_provider",
]
