# pubkeystore/storage/__init__.py

from .models import PublicKeyRecord
from .keystore import PublicKeyStore, KeyStoreSnapshot
from .provider import ArchiveProvider
from .providers.memory_provider import MemoryArchive, MEMORY
from .providers.zip_provider import ZipArchive
import os


def load_archive_provider(config: dict | None = None) -> ArchiveProvider:
    """
    Factory resolver for selecting the archive backend.

        - zip (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("PUBKEYSTORE_ARCHIVE_PROVIDER", "zip")

    if provider == "memory":
        return MemoryArchive()

    if provider == "zip":
        path = config.get("path") or os.getenv("PUBKEYSTORE_ARCHIVE_PATH", "keys/public_keys.pubar")
        strict = config.get("strict")
        if strict is None:
            strict = os.getenv("PUBKEYSTORE_PEM_STRICT", "1") == "1"
        return ZipArchive(path, strict=bool(strict))

    raise ValueError(f"Unknown archive provider: {provider}")


__all__ = [
    "PublicKeyRecord",
    "PublicKeyStore",
    "KeyStoreSnapshot",
    "ArchiveProvider",
    "MemoryArchive",
    "MEMORY",
    "ZipArchive",
    "load_archive_provider",
]
