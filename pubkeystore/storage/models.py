# pubkeystore/storage/models.py
from __future__ import annotations
from dataclasses import dataclass

from pubkeystore.crypto import detect_algorithm, get_algorithm
from pubkeystore.utils import sha256


@dataclass(frozen=True)
class PublicKeyRecord:
    """
    A public key as held by the store: algorithm identifier plus the DER
    SubjectPublicKeyInfo bytes of the key.

    Records are immutable and compare structurally, so two records built
    from the same key are equal regardless of where they came from.
    """
    algorithm: str
    material: bytes

    def __post_init__(self):
        if isinstance(self.material, (bytearray, memoryview)):
            object.__setattr__(self, "material", bytes(self.material))
        if not isinstance(self.material, bytes):
            raise TypeError("material must be bytes")

    @classmethod
    def from_public_key(cls, key) -> "PublicKeyRecord":
        algo = detect_algorithm(key)
        return cls(algorithm=algo.name, material=algo.serialize(key))

    @classmethod
    def from_der(cls, algorithm: str, material: bytes) -> "PublicKeyRecord":
        """Validate `material` against `algorithm` and build a record."""
        algo = get_algorithm(algorithm)
        algo.parse(material)
        return cls(algorithm=algo.name, material=bytes(material))

    def public_key(self):
        return get_algorithm(self.algorithm).parse(self.material)

    @property
    def fingerprint(self) -> str:
        # 16 bytes = 32 hex chars, enough to tell keys apart in logs
        return sha256(self.material)[:32]

    def __repr__(self) -> str:
        return f"PublicKeyRecord(algorithm={self.algorithm!r}, fingerprint={self.fingerprint!r})"
