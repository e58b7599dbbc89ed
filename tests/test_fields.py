import pytest
from keeper_core.crypto import CipherService
from keeper_core.errors import InvalidArgument
from keeper_core.fields import (
    CREDENTIAL_FIELDS,
    decrypt_fields,
    encrypt_fields,
    field_table,
    sensitive_fields,
)
from keeper_core.models import BinaryRecord, CardRecord, CredentialRecord, TextRecord


@pytest.fixture
def cipher():
    return CipherService.from_password("pw1")


SAMPLES = [
    BinaryRecord(id="b1", metadata="photo", data=b"\x00\x01\xffpng"),
    CardRecord(id="c1", metadata="visa", number="4111111111111111", holder="A SMITH", expiration="12/30", cvv="123"),
    CredentialRecord(id="r1", metadata="mail", login="alice", password="hunter2"),
    TextRecord(id="t1", metadata="note", data="secret"),
]


@pytest.mark.parametrize("record", SAMPLES, ids=lambda r: r.kind)
def test_roundtrip_restores_every_field(record, cipher):
    enc = encrypt_fields(record, cipher)
    assert enc.id == record.id
    assert decrypt_fields(enc, cipher) == record


@pytest.mark.parametrize("record", SAMPLES, ids=lambda r: r.kind)
def test_sensitive_fields_become_ciphertext(record, cipher):
    enc = encrypt_fields(record, cipher)
    for name in sensitive_fields(record.kind):
        assert getattr(enc, name) != getattr(record, name)


def test_input_record_is_not_mutated(cipher):
    rec = TextRecord(id="t1", metadata="note", data="secret")
    encrypt_fields(rec, cipher)
    assert rec.data == "secret"


def test_empty_fields_are_skipped(cipher):
    rec = CardRecord(id="c1", metadata="", number="4111", holder="", expiration="", cvv="")
    enc = encrypt_fields(rec, cipher)
    assert enc.metadata == ""
    assert enc.holder == ""
    assert enc.number != "4111"
    assert decrypt_fields(enc, cipher) == rec

    empty = BinaryRecord(id="b1")
    assert encrypt_fields(empty, cipher) == empty


def test_credentials_encrypt_only_metadata_by_default(cipher):
    rec = CredentialRecord(id="r1", metadata="mail", login="alice", password="hunter2")
    enc = encrypt_fields(rec, cipher)
    assert enc.metadata != "mail"
    assert enc.login == "alice"
    assert enc.password == "hunter2"
    assert sensitive_fields("credentials") == ("metadata",)


def test_credentials_encrypt_everything_when_enabled(cipher):
    table = field_table("credentials", encrypt_credentials=True)
    assert all(spec.sensitive for spec in table)
    # the shared default table is left alone
    assert not CREDENTIAL_FIELDS[1].sensitive

    rec = CredentialRecord(id="r1", metadata="mail", login="alice", password="hunter2")
    enc = rec.encrypt_fields(cipher, encrypt_credentials=True)
    assert enc.login != "alice" and enc.password != "hunter2"
    assert enc.decrypt_fields(cipher, encrypt_credentials=True) == rec


def test_id_is_never_encrypted(cipher):
    for rec in SAMPLES:
        assert "id" not in sensitive_fields(rec.kind, encrypt_credentials=True)
        assert encrypt_fields(rec, cipher).id == rec.id


def test_unknown_kind_is_rejected():
    with pytest.raises(InvalidArgument):
        field_table("passports")


def test_record_dict_roundtrip_and_fingerprint():
    rec = BinaryRecord(id="b1", metadata="m", data=b"\x00\x01")
    d = rec.to_dict()
    assert isinstance(d["data"], str)
    assert BinaryRecord.from_dict(d) == rec
    assert rec.fingerprint() == BinaryRecord.from_dict(d).fingerprint()
    assert rec.fingerprint() != rec.copy(metadata="other").fingerprint()

    card = CardRecord.from_dict({"id": "c1", "number": "1", "unknown": "ignored"})
    assert card.number == "1" and card.holder == ""
