import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from pubkeystore.storage import PublicKeyRecord


def _rsa_record():
    sk = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return PublicKeyRecord.from_public_key(sk.public_key())


@pytest.fixture(scope="session")
def rsa_key1():
    return _rsa_record()


@pytest.fixture(scope="session")
def rsa_key2():
    return _rsa_record()


@pytest.fixture(scope="session")
def ec_key():
    sk = ec.generate_private_key(ec.SECP256R1())
    return PublicKeyRecord.from_public_key(sk.public_key())


@pytest.fixture(scope="session")
def ed25519_key():
    return PublicKeyRecord.from_public_key(ed25519.Ed25519PrivateKey.generate().public_key())
