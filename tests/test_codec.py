"""
Tests for VaultCodec sealing and opening of credential records.
"""
import secrets

import pytest

from credvault.exceptions import (
    DecryptionError,
    OwnershipError,
    RecordDecryptionError,
    ValidationError,
    VaultCodecError,
)
from credvault.models import CredentialRecord, StoredRecord
from credvault.vault.codec import VaultCodec
from credvault.vault.crypto import SymmetricCipher

OWNER = "owner-1"


def _tamper(ciphertext: str) -> str:
    i = len(ciphertext) // 2
    replacement = "A" if ciphertext[i] != "A" else "B"
    return ciphertext[:i] + replacement + ciphertext[i + 1:]


class TestSeal:
    """Sealing plaintext credentials for storage."""

    def test_password_is_encrypted(self, codec, cipher, credential_fields):
        stored = codec.seal(OWNER, credential_fields)
        assert isinstance(stored, StoredRecord)
        assert stored.password != "secret1"
        assert cipher.open(stored.password) == "secret1"

    def test_two_factor_is_encrypted(self, codec, cipher, credential_fields):
        credential_fields["two_factor_secret"] = "JBSWY3DPEHPK3PXP"
        stored = codec.seal(OWNER, credential_fields)
        assert stored.two_factor_secret != "JBSWY3DPEHPK3PXP"
        assert cipher.open(stored.two_factor_secret) == "JBSWY3DPEHPK3PXP"

    @pytest.mark.parametrize("value", [None, ""])
    def test_two_factor_absent(self, codec, credential_fields, value):
        credential_fields["two_factor_secret"] = value
        assert codec.seal(OWNER, credential_fields).two_factor_secret is None

    def test_other_fields_untouched(self, codec, credential_fields):
        credential_fields["notes"] = "personal account"
        stored = codec.seal(OWNER, credential_fields)
        assert stored.service_name == "GitHub"
        assert stored.service_url == "https://github.com"
        assert stored.username == "octocat"
        assert stored.notes == "personal account"
        assert stored.owner_id == OWNER

    def test_defaults(self, codec, credential_fields):
        stored = codec.seal(OWNER, credential_fields)
        assert stored.category == "General"
        assert stored.is_pinned is False

    def test_explicit_category_and_pin(self, codec, credential_fields):
        credential_fields.update(category="Work", is_pinned=True)
        stored = codec.seal(OWNER, credential_fields)
        assert stored.category == "Work"
        assert stored.is_pinned is True

    def test_email_is_normalized(self, codec, credential_fields):
        assert codec.seal(OWNER, credential_fields).email == "octo@example.com"

    @pytest.mark.parametrize("field", [
        "service_name", "service_url", "username", "email", "password",
    ])
    def test_required_fields(self, codec, credential_fields, field):
        del credential_fields[field]
        with pytest.raises(ValidationError) as exc:
            codec.seal(OWNER, credential_fields)
        assert exc.value.fields == [field]

    def test_blank_required_field(self, codec, credential_fields):
        credential_fields["username"] = "   "
        with pytest.raises(ValidationError):
            codec.seal(OWNER, credential_fields)

    def test_field_too_long(self, codec, credential_fields):
        credential_fields["service_name"] = "x" * 101
        with pytest.raises(ValidationError) as exc:
            codec.seal(OWNER, credential_fields)
        assert "service_name" in exc.value.fields

    @pytest.mark.parametrize("field,value", [
        ("password", 12345678),
        ("two_factor_secret", 123456),
        ("username", ["octocat"]),
        ("email", {"address": "octo@example.com"}),
    ])
    def test_non_text_field(self, codec, credential_fields, field, value):
        credential_fields[field] = value
        with pytest.raises(ValidationError) as exc:
            codec.seal(OWNER, credential_fields)
        assert exc.value.fields == [field]

    def test_owner_required(self, codec, credential_fields):
        with pytest.raises(ValidationError):
            codec.seal("", credential_fields)

    def test_reseal_keeps_identity(self, codec, credential_fields):
        first = codec.seal(OWNER, credential_fields)
        credential_fields["password"] = "secret2"
        second = codec.seal(OWNER, credential_fields, existing=first)
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert codec.open(OWNER, second).password == "secret2"

    def test_reseal_foreign_record(self, codec, credential_fields):
        foreign = codec.seal("someone-else", credential_fields)
        with pytest.raises(OwnershipError):
            codec.seal(OWNER, credential_fields, existing=foreign)

    def test_seal_from_usable_record(self, codec, credential_fields):
        usable = codec.open(OWNER, codec.seal(OWNER, credential_fields))
        stored = codec.seal(OWNER, usable)
        assert codec.open(OWNER, stored).password == "secret1"


class TestOpen:
    """Opening stored records."""

    def test_round_trip(self, codec, credential_fields):
        credential_fields["two_factor_secret"] = "JBSWY3DPEHPK3PXP"
        record = codec.open(OWNER, codec.seal(OWNER, credential_fields))
        assert isinstance(record, CredentialRecord)
        assert record.password == "secret1"
        assert record.two_factor_secret == "JBSWY3DPEHPK3PXP"
        assert record.has_two_factor is True

    def test_round_trip_without_two_factor(self, codec, credential_fields):
        record = codec.open(OWNER, codec.seal(OWNER, credential_fields))
        assert record.two_factor_secret is None
        assert record.has_two_factor is False

    def test_repr_masks_secrets(self, codec, credential_fields):
        record = codec.open(OWNER, codec.seal(OWNER, credential_fields))
        assert "secret1" not in repr(record)

    def test_tampered_password(self, codec, credential_fields):
        stored = codec.seal(OWNER, {**credential_fields, "two_factor_secret": None})
        tampered = stored.model_copy(update={"password": _tamper(stored.password)})
        with pytest.raises(DecryptionError):
            codec.open(OWNER, tampered)

    def test_tampered_two_factor_fails_whole_record(self, codec, credential_fields):
        credential_fields["two_factor_secret"] = "JBSWY3DPEHPK3PXP"
        stored = codec.seal(OWNER, credential_fields)
        tampered = stored.model_copy(
            update={"two_factor_secret": _tamper(stored.two_factor_secret)}
        )
        with pytest.raises(VaultCodecError) as exc:
            codec.open(OWNER, tampered)
        assert isinstance(exc.value, RecordDecryptionError)

    def test_other_key(self, codec, credential_fields):
        stored = codec.seal(OWNER, credential_fields)
        other = VaultCodec(SymmetricCipher(secrets.token_bytes(32)))
        with pytest.raises(RecordDecryptionError):
            other.open(OWNER, stored)

    def test_plaintext_in_storage_is_rejected(self, codec, credential_fields):
        stored = codec.seal(OWNER, credential_fields)
        leaked = stored.model_copy(update={"password": "secret1"})
        with pytest.raises(RecordDecryptionError):
            codec.open(OWNER, leaked)

    def test_foreign_record(self, codec, credential_fields):
        stored = codec.seal("someone-else", credential_fields)
        with pytest.raises(OwnershipError):
            codec.open(OWNER, stored)
