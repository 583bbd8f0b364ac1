from __future__ import annotations
import io, os, struct, time, zipfile, zlib
from pathlib import Path

from pubkeystore import pem
from pubkeystore.constants import ALGORITHM_EXTRA_TAG, DEFAULT_ALGORITHM, ZIP_NAME_MAX_BYTES
from pubkeystore.errors import ArchiveFileNotFound, ArchiveIOError, InvalidArgument, InvalidPath
from pubkeystore.logger import get_logger
from pubkeystore.storage.keystore import PublicKeyStore
from pubkeystore.storage.models import PublicKeyRecord
from pubkeystore.storage.provider import ArchiveProvider

log = get_logger("PubKey.Archive.Zip")


def validate_path(path) -> Path:
    try:
        raw = os.fspath(path)
    except TypeError as e:
        raise InvalidPath(f"archive path must be a str or PathLike, got {type(path).__name__}") from e
    if not isinstance(raw, str):
        raise InvalidPath("archive path must be text")
    if not raw or "\x00" in raw:
        raise InvalidPath(f"invalid archive path {raw!r}")
    try:
        os.fsencode(raw)
    except UnicodeEncodeError as e:
        raise InvalidPath(f"archive path cannot be encoded for this file system: {raw!r}") from e
    return Path(raw)


def validate_alias(alias: str) -> None:
    """Aliases become zip entry names verbatim, so they must survive that trip."""
    if not isinstance(alias, str) or not alias:
        raise InvalidArgument("alias is required")
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in alias):
        raise InvalidArgument(f"alias {alias!r} contains control characters")
    if alias.endswith("/"):
        raise InvalidArgument(f"alias {alias!r} would be stored as a directory entry")
    if len(alias.encode("utf-8")) > ZIP_NAME_MAX_BYTES:
        raise InvalidArgument("alias is too long for a zip entry name")


def algorithm_extra(algorithm: str) -> bytes:
    """
    Encode the algorithm identifier for the entry's extra field.

    Identifiers under 4 bytes (RSA, EC, DSA) are stored raw, which is what
    older tooling wrote and what zip readers tolerate. Longer ones would be
    misread as extra-field headers, so they get a proper tagged record.
    """
    data = algorithm.encode("ascii")
    if len(data) < 4:
        return data
    return struct.pack("<HH", ALGORITHM_EXTRA_TAG, len(data)) + data


def algorithm_from_extra(extra: bytes) -> str:
    if not extra:
        return DEFAULT_ALGORITHM

    offset = 0
    while offset + 4 <= len(extra):
        tag, size = struct.unpack_from("<HH", extra, offset)
        end = offset + 4 + size
        if end > len(extra):
            break
        if tag == ALGORITHM_EXTRA_TAG:
            return extra[offset + 4:end].decode("ascii", errors="replace") or DEFAULT_ALGORITHM
        offset = end
    else:
        if offset == len(extra):
            # well-formed extra records, none of them ours
            return DEFAULT_ALGORITHM

    # raw identifier bytes
    return extra.decode("ascii", errors="replace")


class ZipArchive(ArchiveProvider):
    """
    Stores every key of a PublicKeyStore as one entry of a zip file:

    - entry name  = alias
    - entry extra = algorithm identifier (RSA when absent)
    - entry data  = PEM block

    The handle only remembers the path; nothing is cached between calls.

    Legacy archives written with raw algorithm names of 4 bytes or more
    (EdDSA, XDH, ...) cannot be opened: zipfile reads such an extra field as
    a corrupt header and the whole archive fails with ArchiveIOError, RSA
    entries included. Names under 4 bytes (RSA, EC, DSA) read fine.
    """

    name = "zip"

    def __init__(self, path, strict: bool = True, compression: int = zipfile.ZIP_DEFLATED):
        self.path = validate_path(path)
        self.strict = strict
        self.compression = compression

    def __repr__(self) -> str:
        return f"ZipArchive(path={str(self.path)!r}, strict={self.strict})"

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def store(self, keystore: PublicKeyStore) -> None:
        """
        Write a snapshot of the store, then mark it unchanged.

        The flag is reset after the file is written, so an edit made by another
        thread between the snapshot and that reset is reported as saved even
        though it never reached the file. Serialize edits with store() when
        that matters.
        """
        snapshot = keystore.iterate()
        for alias, _ in snapshot:
            validate_alias(alias)

        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with zipfile.ZipFile(tmp, "w", compression=self.compression) as zf:
                for alias, record in snapshot:
                    self._write_entry(zf, alias, record)
            os.replace(tmp, self.path)
        except OSError as e:
            self._discard(tmp)
            raise ArchiveIOError(f"cannot write archive {self.path}: {e}") from e
        except Exception:
            self._discard(tmp)
            raise

        keystore.set_changed(False)
        log.info(f"[ZIP] stored keys={len(snapshot)} path={self.path}")

    def _write_entry(self, zf: zipfile.ZipFile, alias: str, record: PublicKeyRecord) -> None:
        info = zipfile.ZipInfo(alias, date_time=time.localtime(time.time())[:6])
        info.compress_type = self.compression
        info.external_attr = 0o644 << 16
        info.extra = algorithm_extra(record.algorithm)

        with zf.open(info, "w") as raw, io.TextIOWrapper(raw, encoding="ascii", newline="\n") as writer:
            pem.encode(record.material, writer)
        log.debug(f"[ZIP] wrote alias={alias} algorithm={record.algorithm} fpr={record.fingerprint}")

    @staticmethod
    def _discard(tmp: Path) -> None:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            log.warning(f"[ZIP] could not remove temporary file {tmp}")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def load(self, keystore: PublicKeyStore) -> None:
        """
        Replace the store contents with the archive contents. On success the
        store is marked unchanged; on failure it keeps the keys read so far
        and stays marked changed.
        """
        with self._open_for_read() as zf:
            keystore.clear()
            count = self._apply(zf, keystore)
        keystore.set_changed(False)
        log.info(f"[ZIP] loaded keys={count} path={self.path}")

    def update(self, keystore: PublicKeyStore) -> None:
        """
        Add the archive's keys to the store without removing any.

        The change flag ends up as "was changed before OR some add changed
        it", so unsaved in-memory edits are never masked. Not atomic: a bad
        entry aborts the call with earlier entries already added.
        """
        with self._open_for_read() as zf:
            saved = keystore.is_changed()
            keystore.set_changed(False)
            try:
                count = self._apply(zf, keystore)
            finally:
                keystore.set_changed(saved or keystore.is_changed())
        log.info(f"[ZIP] updated keys={count} path={self.path} changed={keystore.is_changed()}")

    def _open_for_read(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, "r")
        except FileNotFoundError as e:
            raise ArchiveFileNotFound(f"archive not found: {self.path}") from e
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveIOError(f"cannot read archive {self.path}: {e}") from e

    def _apply(self, zf: zipfile.ZipFile, keystore: PublicKeyStore) -> int:
        count = 0
        for info in zf.infolist():
            if info.is_dir():
                log.debug(f"[ZIP] skipping directory entry {info.filename}")
                continue

            algorithm = algorithm_from_extra(info.extra)
            try:
                with zf.open(info) as raw:
                    record = pem.decode(io.TextIOWrapper(raw, encoding="ascii"), algorithm, strict=self.strict)
            except (OSError, zipfile.BadZipFile, zlib.error) as e:
                raise ArchiveIOError(f"cannot read entry {info.filename!r} of {self.path}: {e}") from e

            keystore.add(info.filename, record)
            count += 1
        return count
