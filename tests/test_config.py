"""
Tests for configuration loading and the owned vault context.
"""
import base64
import secrets

import pytest

from credvault.auth.hashing import SaltedDigestHasher
from credvault.conf import VaultConfig, decode_key, generate_encryption_key
from credvault.context import VaultContext
from credvault.vault.master_lock import LockStatus


class TestVaultConfig:
    """Environment loading and validation."""

    def test_from_env(self, vault_env, key):
        config = VaultConfig.from_env()
        assert config.encryption_key == key
        assert config.token_expiry == 7 * 24 * 3600
        assert config.bcrypt_rounds == 4
        assert config.min_password_length == 8
        assert config.insecure_demo_mode is False
        assert config.has_master_override is False

    def test_missing_key(self, vault_env):
        vault_env.delenv("VAULT_ENCRYPTION_KEY")
        with pytest.raises(RuntimeError, match="VAULT_ENCRYPTION_KEY"):
            VaultConfig.from_env()

    def test_missing_secret(self, vault_env):
        vault_env.delenv("VAULT_TOKEN_SECRET")
        with pytest.raises(RuntimeError, match="VAULT_TOKEN_SECRET"):
            VaultConfig.from_env()

    def test_short_key(self, vault_env):
        vault_env.setenv("VAULT_ENCRYPTION_KEY", base64.b64encode(b"k" * 16).decode())
        with pytest.raises(ValueError, match="32 bytes"):
            VaultConfig.from_env()

    def test_key_not_base64(self, vault_env):
        vault_env.setenv("VAULT_ENCRYPTION_KEY", "not base64!!")
        with pytest.raises(ValueError):
            VaultConfig.from_env()

    def test_short_secret(self, key):
        with pytest.raises(ValueError):
            VaultConfig(encryption_key=key, token_secret="short")

    def test_overrides(self, vault_env):
        vault_env.setenv("VAULT_TOKEN_EXPIRY", "3600")
        vault_env.setenv("VAULT_MIN_PASSWORD_LENGTH", "12")
        vault_env.setenv("VAULT_INSECURE_DEMO_MODE", "true")
        config = VaultConfig.from_env()
        assert config.token_expiry == 3600
        assert config.min_password_length == 12
        assert config.insecure_demo_mode is True

    def test_expiry_lower_bound(self, vault_env):
        vault_env.setenv("VAULT_TOKEN_EXPIRY", "10")
        with pytest.raises(ValueError):
            VaultConfig.from_env()

    def test_master_override_needs_both(self, vault_env):
        vault_env.setenv("MASTER_PASSWORD_HASH", "ab" * 32)
        with pytest.raises(ValueError):
            VaultConfig.from_env()

    def test_master_override(self, vault_env):
        vault_env.setenv("MASTER_PASSWORD_HASH", "ab" * 32)
        vault_env.setenv("MASTER_PASSWORD_SALT", "cd" * 16)
        assert VaultConfig.from_env().has_master_override is True

    def test_config_is_frozen(self, config):
        with pytest.raises(ValueError):
            config.token_expiry = 60

    def test_generate_encryption_key(self):
        assert len(decode_key(generate_encryption_key())) == 32
        assert generate_encryption_key() != generate_encryption_key()


class TestVaultContext:
    """Wiring and lifecycle."""

    def test_end_to_end(self, config, credential_fields):
        with VaultContext(config) as ctx:
            account = ctx.gate.register("a@example.com", "pw1234567", "Jane", "Doe", "mp1234567")
            result = ctx.gate.login("a@example.com", "pw1234567")
            claims = ctx.gate.authenticate(result.token)
            created = ctx.credentials.create(claims.account_id, credential_fields)
            assert ctx.credentials.get(account.id, created.id).password == "secret1"
        assert ctx.closed is True

    def test_from_env(self, vault_env):
        ctx = VaultContext.from_env()
        assert ctx.master_lock.status() is LockStatus.NEEDS_SETUP
        ctx.close()
        ctx.close()
        assert ctx.closed is True

    def test_provisioned_master_lock(self, vault_env):
        salt = secrets.token_hex(16)
        vault_env.setenv("MASTER_PASSWORD_HASH", SaltedDigestHasher().hash("mp1234567", salt))
        vault_env.setenv("MASTER_PASSWORD_SALT", salt)
        with VaultContext.from_env() as ctx:
            assert ctx.master_lock.status() is LockStatus.UNLOCKABLE
            assert ctx.master_lock.unlock("mp1234567") is True
            assert ctx.master_lock.unlock("wrong-one") is False

    def test_state_file_lock(self, vault_env, tmp_path):
        vault_env.setenv("VAULT_MASTER_LOCK_PATH", str(tmp_path / "master.json"))
        with VaultContext.from_env() as ctx:
            ctx.master_lock.save(ctx.master_lock.setup("mp1234567"))
            assert ctx.master_lock.unlock("mp1234567") is True
