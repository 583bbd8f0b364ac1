# pubkeystore/storage/provider.py
from __future__ import annotations

from pubkeystore.storage.keystore import PublicKeyStore


class ArchiveProvider:
    """
    Persistence backend for a PublicKeyStore.

    store()  writes every key of the store, then marks the store unchanged.
    load()   replaces the store contents with the archive contents.
    update() adds/replaces keys from the archive without removing any.

    Archive operations against one store must be serialized by the caller.
    """
    name: str = "base"

    def store(self, keystore: PublicKeyStore) -> None:
        raise NotImplementedError

    def load(self, keystore: PublicKeyStore) -> None:
        raise NotImplementedError

    def update(self, keystore: PublicKeyStore) -> None:
        raise NotImplementedError
