# pubkeystore/storage/keystore.py
from __future__ import annotations
import threading
from typing import Dict, Iterator, Optional, Tuple

from pubkeystore.errors import InvalidArgument
from pubkeystore.logger import get_logger
from pubkeystore.storage.models import PublicKeyRecord

log = get_logger("PubKey.Store")

KeyStoreSnapshot = Tuple[Tuple[str, PublicKeyRecord], ...]


def _require_alias(alias) -> str:
    if not isinstance(alias, str) or not alias:
        raise InvalidArgument("alias is required")
    return alias


class PublicKeyStore:
    """
    Thread-safe alias -> PublicKeyRecord mapping with a change flag.

    The flag turns True on every mutation that alters the contents (and on
    every clear()) and only goes back to False through set_changed(), which
    the archives call after a successful store or load.

    One RLock owned by the instance covers add, remove, clear, snapshot
    construction and lookups. Archives never hold it across file I/O: they
    take a snapshot or add entries one at a time.
    """

    def __init__(self):
        self._keys: Dict[str, PublicKeyRecord] = {}
        self._lock = threading.RLock()
        self._changed = False  # new store is unchanged

    def add(self, alias: str, key: PublicKeyRecord) -> None:
        _require_alias(alias)
        if key is None:
            raise InvalidArgument("key is required")
        if not isinstance(key, PublicKeyRecord):
            raise InvalidArgument(f"key must be a PublicKeyRecord, got {type(key).__name__}")

        with self._lock:
            if self._keys.get(alias) == key:
                return
            self._keys[alias] = key
            self._changed = True
        log.debug(f"[STORE] add alias={alias} algorithm={key.algorithm} fpr={key.fingerprint}")

    def remove(self, alias: str) -> None:
        _require_alias(alias)
        with self._lock:
            if self._keys.pop(alias, None) is None:
                return
            self._changed = True
        log.debug(f"[STORE] remove alias={alias}")

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()
            self._changed = True

    def find_key(self, alias: str) -> Optional[PublicKeyRecord]:
        _require_alias(alias)
        with self._lock:
            return self._keys.get(alias)

    def is_changed(self) -> bool:
        with self._lock:
            return self._changed

    @property
    def changed(self) -> bool:
        return self.is_changed()

    def set_changed(self, changed: bool) -> None:
        """
        Archive collaboration hook: archives reset the flag after a
        successful store/load and restore it around update(). Not meant
        for general use.
        """
        with self._lock:
            self._changed = bool(changed)

    def iterate(self) -> KeyStoreSnapshot:
        """Point-in-time copy of the (alias, key) pairs, in no particular order."""
        with self._lock:
            return tuple(self._keys.items())

    def aliases(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._keys)

    def __iter__(self) -> Iterator[Tuple[str, PublicKeyRecord]]:
        return iter(self.iterate())

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __contains__(self, alias) -> bool:
        with self._lock:
            return alias in self._keys
