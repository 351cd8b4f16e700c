import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from jwsgate.config import set_config


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default config."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def hmac_key():
    return b"0123456789abcdef0123456789abcdef"


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ed_key():
    return ed25519.Ed25519PrivateKey.generate()
