"""
pubkeystore.pem
---------------
Textual framing of public keys:

    -----BEGIN PUBLIC KEY-----
    <base64 of the DER SubjectPublicKeyInfo, 64 chars per line>
    -----END PUBLIC KEY-----

decode() matches the header and footer as whole lines and fails closed when
either is missing. Archives produced by tools that wrote the delimiters
inconsistently can be read with strict=False, which strips the delimiters
wherever they appear and only warns about missing ones.
"""

from __future__ import annotations
import io, os
from typing import Iterable, TextIO

from pubkeystore.constants import DEFAULT_ALGORITHM, PEM_FOOTER, PEM_HEADER, PEM_LINE_WIDTH
from pubkeystore.errors import ArchiveFileNotFound, ArchiveIOError, MalformedKeyFormat
from pubkeystore.logger import get_logger
from pubkeystore.storage.models import PublicKeyRecord
from pubkeystore.utils import b64d, b64e, strip_whitespace

log = get_logger("PubKey.PEM")


def encode(material: bytes, writer: TextIO) -> None:
    """Write `material` as a PEM block. The writer is neither flushed nor closed."""
    body = b64e(material)
    writer.write(PEM_HEADER)
    writer.write("\n")
    for i in range(0, len(body), PEM_LINE_WIDTH):
        writer.write(body[i:i + PEM_LINE_WIDTH])
        writer.write("\n")
    writer.write(PEM_FOOTER)
    writer.write("\n")


def decode(reader: Iterable[str], algorithm: str = DEFAULT_ALGORITHM, strict: bool = True) -> PublicKeyRecord:
    """
    Read one PEM block from `reader` (any iterable of text lines) and build
    a PublicKeyRecord for `algorithm`.

    Raises MalformedKeyFormat for bad framing, bad base64 or a DER blob that
    is not a key of that algorithm, and UnsupportedAlgorithm when the
    algorithm is unknown.
    """
    try:
        body = _read_strict(reader) if strict else _read_permissive(reader)
    except UnicodeDecodeError as e:
        raise MalformedKeyFormat(f"PEM block is not text: {e}") from e

    try:
        material = b64d(strip_whitespace(body))
    except ValueError as e:
        raise MalformedKeyFormat(str(e)) from e

    return PublicKeyRecord.from_der(algorithm, material)


def _read_strict(reader: Iterable[str]) -> str:
    lines = iter(reader)
    for line in lines:
        if line.rstrip("\r\n") == PEM_HEADER:
            break
    else:
        raise MalformedKeyFormat(f"missing {PEM_HEADER}")

    body = []
    for line in lines:
        line = line.rstrip("\r\n")
        if line == PEM_FOOTER:
            return "".join(body)
        body.append(line)
    raise MalformedKeyFormat(f"missing {PEM_FOOTER}")


def _read_permissive(reader: Iterable[str]) -> str:
    text = "".join(reader)
    if PEM_HEADER not in text:
        log.warning(f"[PEM] {PEM_HEADER} not found, reading body as-is")
    if PEM_FOOTER not in text:
        log.warning(f"[PEM] {PEM_FOOTER} not found, reading body as-is")
    return text.replace(PEM_HEADER, "").replace(PEM_FOOTER, "")


def dumps(record: PublicKeyRecord) -> str:
    buf = io.StringIO()
    encode(record.material, buf)
    return buf.getvalue()


def loads(pem: str, algorithm: str = DEFAULT_ALGORITHM, strict: bool = True) -> PublicKeyRecord:
    return decode(io.StringIO(pem), algorithm, strict=strict)


def read_key_file(path, algorithm: str = DEFAULT_ALGORITHM, strict: bool = True) -> PublicKeyRecord:
    """Load a standalone .pem / .pub file."""
    try:
        with open(os.fspath(path), "r", encoding="ascii") as f:
            record = decode(f, algorithm, strict=strict)
    except FileNotFoundError as e:
        raise ArchiveFileNotFound(f"key file not found: {path}") from e
    except OSError as e:
        raise ArchiveIOError(f"cannot read key file {path}: {e}") from e
    log.info(f"[PEM] read {record.algorithm} key from {path} fpr={record.fingerprint}")
    return record
