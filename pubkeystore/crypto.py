"""
pubkeystore.crypto
------------------
Capability table mapping algorithm identifiers to public-key parsers.

Each KeyAlgorithm knows how to turn DER SubjectPublicKeyInfo bytes into a
`cryptography` public key object and back. The PEM codec and the archives
only ever talk to this table, so supporting another algorithm is a single
register_algorithm() call.

Built in: RSA, EC, DSA, Ed25519, Ed448, X25519, X448, plus the generic
EdDSA and XDH names covering both curves of each family.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple, Type
from cryptography.exceptions import UnsupportedAlgorithm as _CryptoUnsupported
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa, x448, x25519

from .errors import MalformedKeyFormat, UnsupportedAlgorithm


@dataclass(frozen=True)
class KeyAlgorithm:
    name: str
    key_types: Tuple[Type, ...]

    def parse(self, material: bytes):
        try:
            key = serialization.load_der_public_key(material)
        except (ValueError, TypeError, _CryptoUnsupported) as e:
            raise MalformedKeyFormat(f"not a valid {self.name} public key encoding: {e}") from e
        if not isinstance(key, self.key_types):
            raise MalformedKeyFormat(f"encoded key is not a {self.name} public key")
        return key

    def serialize(self, key) -> bytes:
        if not isinstance(key, self.key_types):
            raise MalformedKeyFormat(f"{type(key).__name__} is not a {self.name} public key")
        return key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )


_ALGORITHMS: Dict[str, KeyAlgorithm] = {}


def register_algorithm(name: str, *key_types: Type) -> KeyAlgorithm:
    if not name or not key_types:
        raise ValueError("algorithm name and at least one key type are required")
    algo = KeyAlgorithm(name=name, key_types=tuple(key_types))
    _ALGORITHMS[name.upper()] = algo
    return algo


def get_algorithm(name: str) -> KeyAlgorithm:
    algo = _ALGORITHMS.get((name or "").upper())
    if algo is None:
        raise UnsupportedAlgorithm(f"no public key support for algorithm {name!r}")
    return algo


def detect_algorithm(key) -> KeyAlgorithm:
    for algo in _ALGORITHMS.values():
        if isinstance(key, algo.key_types):
            return algo
    raise UnsupportedAlgorithm(f"no registered algorithm for {type(key).__name__}")


def supported_algorithms() -> list[str]:
    return sorted(algo.name for algo in _ALGORITHMS.values())


register_algorithm("RSA", rsa.RSAPublicKey)
register_algorithm("EC", ec.EllipticCurvePublicKey)
register_algorithm("DSA", dsa.DSAPublicKey)
register_algorithm("Ed25519", ed25519.Ed25519PublicKey)
register_algorithm("Ed448", ed448.Ed448PublicKey)
register_algorithm("X25519", x25519.X25519PublicKey)
register_algorithm("X448", x448.X448PublicKey)

# Generic names other tooling writes for the same keys
register_algorithm("EdDSA", ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)
register_algorithm("XDH", x25519.X25519PublicKey, x448.X448PublicKey)
