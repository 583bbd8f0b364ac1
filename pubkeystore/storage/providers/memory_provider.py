from pubkeystore.logger import get_logger
from pubkeystore.storage.keystore import PublicKeyStore
from pubkeystore.storage.provider import ArchiveProvider

log = get_logger("PubKey.Archive.Memory")


class MemoryArchive(ArchiveProvider):
    """In-memory only: nothing is ever read or written, the store is left untouched."""

    name = "memory"

    def store(self, keystore: PublicKeyStore) -> None:
        log.debug(f"[MEMORY-SKIP] store keys={len(keystore)}")

    def load(self, keystore: PublicKeyStore) -> None:
        log.debug("[MEMORY-SKIP] load")

    def update(self, keystore: PublicKeyStore) -> None:
        log.debug("[MEMORY-SKIP] update")


MEMORY = MemoryArchive()
