import sys
import zipfile

import pytest
from pubkeystore import pem
from pubkeystore.constants import PEM_FOOTER
from pubkeystore.errors import (
    ArchiveFileNotFound, ArchiveIOError, InvalidArgument, InvalidPath, MalformedKeyFormat, UnsupportedAlgorithm,
)
from pubkeystore.storage import MEMORY, MemoryArchive, PublicKeyStore, ZipArchive
from pubkeystore.storage.providers import zip_provider
from pubkeystore.storage.providers.zip_provider import algorithm_extra, algorithm_from_extra


@pytest.fixture
def keystore(rsa_key1, rsa_key2):
    store = PublicKeyStore()
    store.add("key1", rsa_key1)
    store.add("key2", rsa_key2)
    return store


def _write_raw_archive(path, entries):
    """entries: (name, extra, text) triples written without going through ZipArchive."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, extra, text in entries:
            info = zipfile.ZipInfo(name)
            info.extra = extra
            zf.writestr(info, text)


def test_store_load(tmp_path, keystore, rsa_key1, rsa_key2):
    path = tmp_path / "keys.pubar"
    archive = ZipArchive(str(path))
    archive.store(keystore)
    assert keystore.is_changed() is False

    loaded = PublicKeyStore()
    archive.load(loaded)

    assert loaded.find_key("key1") == rsa_key1
    assert loaded.find_key("key2") == rsa_key2
    assert set(loaded.iterate()) == set(keystore.iterate())
    assert loaded.is_changed() is False


def test_store_mixed_algorithms_roundtrip(tmp_path, rsa_key1, ec_key, ed25519_key):
    store = PublicKeyStore()
    store.add("rsa", rsa_key1)
    store.add("ec", ec_key)
    store.add("ed", ed25519_key)

    archive = ZipArchive(tmp_path / "mixed.pubar")
    archive.store(store)

    loaded = PublicKeyStore()
    archive.load(loaded)
    assert dict(loaded) == dict(store)
    assert loaded.find_key("ed").algorithm == "Ed25519"


def test_entry_layout(tmp_path, keystore, rsa_key1, ed25519_key):
    keystore.add("ed", ed25519_key)
    path = tmp_path / "keys.pubar"
    ZipArchive(path).store(keystore)

    with zipfile.ZipFile(path) as zf:
        assert sorted(zf.namelist()) == ["ed", "key1", "key2"]
        assert zf.getinfo("key1").extra == b"RSA"
        assert algorithm_from_extra(zf.getinfo("ed").extra) == "Ed25519"
        assert zf.read("key1").decode("ascii") == pem.dumps(rsa_key1)


def test_store_overwrites_and_leaves_no_temp_file(tmp_path, keystore, rsa_key1):
    path = tmp_path / "keys.pubar"
    archive = ZipArchive(path)
    archive.store(keystore)

    keystore.remove("key2")
    archive.store(keystore)

    loaded = PublicKeyStore()
    archive.load(loaded)
    assert dict(loaded) == {"key1": rsa_key1}
    assert [p.name for p in tmp_path.iterdir()] == ["keys.pubar"]


def test_store_missing_parent_directory(tmp_path, keystore):
    archive = ZipArchive(tmp_path / "missing" / "keys.pubar")
    with pytest.raises(ArchiveIOError):
        archive.store(keystore)
    assert keystore.is_changed()


def test_store_rejects_unarchivable_alias(tmp_path, rsa_key1):
    store = PublicKeyStore()
    store.add("dir/", rsa_key1)
    path = tmp_path / "keys.pubar"
    with pytest.raises(InvalidArgument):
        ZipArchive(path).store(store)
    assert not path.exists()


def test_load_not_found(tmp_path):
    archive = ZipArchive(tmp_path / "fake")
    with pytest.raises(ArchiveFileNotFound):
        archive.load(PublicKeyStore())
    with pytest.raises(FileNotFoundError):
        archive.update(PublicKeyStore())


def test_load_corrupt_archive(tmp_path):
    path = tmp_path / "keys.pubar"
    path.write_bytes(b"this is not a zip file")
    with pytest.raises(ArchiveIOError):
        ZipArchive(path).load(PublicKeyStore())


@pytest.mark.parametrize("path", ["", "bad\x00path", None, 42])
def test_invalid_path(path):
    with pytest.raises(InvalidPath):
        ZipArchive(path)


def test_load_replaces_contents(tmp_path, keystore, rsa_key1, ec_key):
    archive = ZipArchive(tmp_path / "keys.pubar")
    archive.store(keystore)

    other = PublicKeyStore()
    other.add("stale", ec_key)
    archive.load(other)

    assert "stale" not in other
    assert other.find_key("key1") == rsa_key1
    assert other.is_changed() is False


def test_update_preserves_pending_change(tmp_path, keystore, ec_key):
    archive = ZipArchive(tmp_path / "keys.pubar")
    archive.store(keystore)

    keystore.add("local", ec_key)
    assert keystore.is_changed()

    archive.update(keystore)
    assert keystore.is_changed()
    assert keystore.find_key("local") == ec_key


def test_update_without_new_keys_keeps_unchanged(tmp_path, keystore):
    archive = ZipArchive(tmp_path / "keys.pubar")
    archive.store(keystore)

    archive.update(keystore)
    assert keystore.is_changed() is False


def test_update_reports_new_keys(tmp_path, keystore, rsa_key1):
    archive = ZipArchive(tmp_path / "keys.pubar")
    archive.store(keystore)

    partial = PublicKeyStore()
    partial.add("key1", rsa_key1)
    partial.set_changed(False)

    archive.update(partial)
    assert len(partial) == 2
    assert partial.is_changed()


def test_update_is_not_atomic(tmp_path, rsa_key1):
    path = tmp_path / "keys.pubar"
    _write_raw_archive(path, [
        ("good", b"RSA", pem.dumps(rsa_key1)),
        ("bad", b"RSA", pem.dumps(rsa_key1).replace(PEM_FOOTER, "")),
    ])

    store = PublicKeyStore()
    with pytest.raises(MalformedKeyFormat):
        ZipArchive(path).update(store)
    assert store.find_key("good") == rsa_key1
    assert store.find_key("bad") is None
    assert store.is_changed()


def test_missing_algorithm_defaults_to_rsa(tmp_path, rsa_key1):
    path = tmp_path / "legacy.pubar"
    _write_raw_archive(path, [("legacy", b"", pem.dumps(rsa_key1))])

    store = PublicKeyStore()
    ZipArchive(path).load(store)
    assert store.find_key("legacy") == rsa_key1


def test_unknown_algorithm_in_archive(tmp_path, rsa_key1):
    path = tmp_path / "keys.pubar"
    _write_raw_archive(path, [("k", b"XYZ", pem.dumps(rsa_key1))])
    with pytest.raises(UnsupportedAlgorithm):
        ZipArchive(path).load(PublicKeyStore())


def test_permissive_archive(tmp_path, rsa_key1):
    path = tmp_path / "keys.pubar"
    _write_raw_archive(path, [("k", b"RSA", pem.dumps(rsa_key1).replace(PEM_FOOTER, ""))])

    store = PublicKeyStore()
    ZipArchive(path, strict=False).load(store)
    assert store.find_key("k") == rsa_key1


def test_algorithm_extra_encoding():
    assert algorithm_extra("RSA") == b"RSA"
    assert algorithm_from_extra(b"RSA") == "RSA"
    assert algorithm_from_extra(b"") == "RSA"
    assert algorithm_from_extra(algorithm_extra("Ed25519")) == "Ed25519"
    # an unrelated, well-formed extended-timestamp record
    assert algorithm_from_extra(b"\x55\x54\x05\x00\x01\x00\x00\x00\x00") == "RSA"


def test_store_logs(tmp_path, keystore, caplog):
    ZipArchive(tmp_path / "keys.pubar").store(keystore)
    assert "stored keys=2" in caplog.text


def test_memory_archive_is_noop(rsa_key1):
    store = PublicKeyStore()
    store.add("key1", rsa_key1)

    for archive in (MEMORY, MemoryArchive()):
        archive.load(store)
        archive.store(store)
        archive.update(store)

    assert store.find_key("key1") == rsa_key1
    assert store.is_changed()


@pytest.mark.parametrize("alias", ["bad\x01alias", "tab\there", "a" * 65536])
def test_store_rejects_control_chars_and_long_aliases(tmp_path, rsa_key1, alias):
    store = PublicKeyStore()
    store.add(alias, rsa_key1)
    path = tmp_path / "keys.pubar"
    with pytest.raises(InvalidArgument):
        ZipArchive(path).store(store)
    assert not path.exists()
    assert store.is_changed()


@pytest.mark.skipif(sys.platform == "win32", reason="lone surrogates encode on Windows")
def test_invalid_path_not_encodable():
    # surrogateescape only maps \udc80-\udcff, so a high surrogate cannot be encoded
    with pytest.raises(InvalidPath):
        ZipArchive("keys-\ud800.pubar")


def test_invalid_path_strict_fs_encoding(monkeypatch):
    def strict_fsencode(name):
        return name.encode("ascii")

    monkeypatch.setattr(zip_provider.os, "fsencode", strict_fsencode)
    with pytest.raises(InvalidPath):
        ZipArchive("keys-\udcff.pubar")


def test_generic_algorithm_names_in_archive(tmp_path, ed25519_key):
    path = tmp_path / "keys.pubar"
    _write_raw_archive(path, [("ed", algorithm_extra("EdDSA"), pem.dumps(ed25519_key))])

    store = PublicKeyStore()
    ZipArchive(path).load(store)
    assert store.find_key("ed").algorithm == "EdDSA"
    assert store.find_key("ed").material == ed25519_key.material
