"""Shared fixtures for credvault tests."""
import base64
import secrets

import pytest

from credvault.auth.gate import AuthGate
from credvault.auth.hashing import AdaptiveHasher, SaltedDigestHasher
from credvault.auth.tokens import TokenIssuer
from credvault.conf import VaultConfig
from credvault.service import CredentialService
from credvault.storage import MemoryStore
from credvault.vault.codec import VaultCodec
from credvault.vault.crypto import SymmetricCipher

TOKEN_SECRET = "test-signing-secret-0123456789abcdef"
OTHER_SECRET = "another-signing-secret-fedcba9876543210"


@pytest.fixture
def key():
    return secrets.token_bytes(32)


@pytest.fixture
def cipher(key):
    return SymmetricCipher(key)


@pytest.fixture
def hasher():
    """Fast bcrypt for tests."""
    return AdaptiveHasher(rounds=4)


@pytest.fixture
def digest_hasher():
    return SaltedDigestHasher()


@pytest.fixture
def issuer():
    return TokenIssuer(TOKEN_SECRET)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gate(store, hasher, issuer):
    return AuthGate(store, hasher, issuer)


@pytest.fixture
def codec(cipher):
    return VaultCodec(cipher)


@pytest.fixture
def service(store, codec):
    return CredentialService(store, codec)


@pytest.fixture
def credential_fields():
    return {
        "service_name": "GitHub",
        "service_url": "https://github.com",
        "username": "octocat",
        "email": "Octo@Example.com",
        "password": "secret1",
    }


@pytest.fixture
def config(key):
    return VaultConfig(
        encryption_key=key,
        token_secret=TOKEN_SECRET,
        bcrypt_rounds=4,
    )


@pytest.fixture
def vault_env(monkeypatch, key):
    """Minimal environment for VaultConfig.from_env()."""
    for name in (
        "VAULT_TOKEN_EXPIRY",
        "VAULT_BCRYPT_ROUNDS",
        "VAULT_MIN_PASSWORD_LENGTH",
        "MASTER_PASSWORD_HASH",
        "MASTER_PASSWORD_SALT",
        "VAULT_MASTER_LOCK_PATH",
        "VAULT_INSECURE_DEMO_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VAULT_ENCRYPTION_KEY", base64.b64encode(key).decode("ascii"))
    monkeypatch.setenv("VAULT_TOKEN_SECRET", TOKEN_SECRET)
    monkeypatch.setenv("VAULT_BCRYPT_ROUNDS", "4")
    return monkeypatch


@pytest.fixture
def token_secret():
    return TOKEN_SECRET


@pytest.fixture
def other_issuer():
    """Issuer holding a different signing secret."""
    return TokenIssuer(OTHER_SECRET)
