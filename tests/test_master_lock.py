"""
Tests for the local master-password gate.
"""
import logging

import orjson
import pytest

from credvault.exceptions import ValidationError
from credvault.models import MasterLockState
from credvault.vault.master_lock import LockStatus, MasterLock


@pytest.fixture
def lock():
    return MasterLock()


@pytest.fixture
def state(lock):
    return lock.setup("mp1234567")


class TestSetupAndUnlock:
    """Setting up and unlocking with explicit state."""

    def test_setup_returns_salted_digest(self, state):
        assert isinstance(state, MasterLockState)
        assert state.digest != "mp1234567"
        assert len(state.salt) == 32

    def test_setup_uses_fresh_salt(self, lock):
        first = lock.setup("mp1234567")
        second = lock.setup("mp1234567")
        assert first.salt != second.salt
        assert first.digest != second.digest

    def test_setup_rejects_short_password(self, lock):
        with pytest.raises(ValidationError):
            lock.setup("short")

    def test_unlock(self, lock, state):
        assert lock.unlock("mp1234567", state) is True

    def test_unlock_wrong_password(self, lock, state):
        assert lock.unlock("mp7654321", state) is False

    def test_unlock_non_text(self, lock, state):
        assert lock.unlock(None, state) is False

    def test_is_configured(self, lock, state):
        assert lock.is_configured(state) is True
        assert lock.status(state) is LockStatus.UNLOCKABLE


class TestNeedsSetup:
    """No state anywhere means needs setup, never open."""

    def test_status(self, lock):
        assert lock.is_configured() is False
        assert lock.status() is LockStatus.NEEDS_SETUP

    @pytest.mark.parametrize("attempt", ["anything", "mp1234567", ""])
    def test_unlock_refused(self, lock, attempt):
        assert lock.unlock(attempt) is False


class TestInsecureDemoMode:
    """Permissive fallback must be explicit and loud."""

    def test_warns_on_construction(self, caplog):
        with caplog.at_level(logging.WARNING, logger="credvault.vault"):
            MasterLock(insecure_demo_mode=True)
        assert "INSECURE DEMO MODE" in caplog.text

    def test_accepts_non_blank(self, caplog):
        lock = MasterLock(insecure_demo_mode=True)
        assert lock.status() is LockStatus.INSECURE_DEMO
        assert lock.is_configured() is False
        with caplog.at_level(logging.WARNING, logger="credvault.vault"):
            assert lock.unlock("anything") is True
        assert "INSECURE DEMO MODE" in caplog.text

    @pytest.mark.parametrize("attempt", ["", "   ", None])
    def test_rejects_blank(self, attempt):
        assert MasterLock(insecure_demo_mode=True).unlock(attempt) is False

    def test_configured_state_wins(self, state):
        lock = MasterLock(insecure_demo_mode=True)
        assert lock.unlock("wrong-password", state) is False
        assert lock.unlock("mp1234567", state) is True


class TestStateResolution:
    """Provisioned values and the local state file."""

    def test_provisioned_state(self, state):
        lock = MasterLock(provisioned=state)
        assert lock.status() is LockStatus.UNLOCKABLE
        assert lock.unlock("mp1234567") is True
        assert lock.unlock("nope-nope") is False

    def test_explicit_state_overrides_provisioned(self, lock, state):
        other = lock.setup("other-pass")
        provisioned = MasterLock(provisioned=state)
        assert provisioned.unlock("other-pass", other) is True

    def test_save_and_load(self, tmp_path, state):
        path = tmp_path / "lock" / "master.json"
        lock = MasterLock(state_path=path)
        assert lock.status() is LockStatus.NEEDS_SETUP
        lock.save(state)
        assert path.exists()
        assert (path.stat().st_mode & 0o777) == 0o600
        assert lock.load() == state
        assert lock.unlock("mp1234567") is True

    def test_state_file_format(self, tmp_path, state):
        path = tmp_path / "master.json"
        MasterLock(state_path=path).save(state)
        assert orjson.loads(path.read_bytes()) == {"digest": state.digest, "salt": state.salt}

    def test_corrupt_state_file(self, tmp_path):
        path = tmp_path / "master.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            MasterLock(state_path=path).load()

    def test_save_without_path(self, lock, state):
        with pytest.raises(RuntimeError):
            lock.save(state)
