import logging

import pytest

from FieldSecurity.errors import DecryptionError
from FieldSecurity.field_level_encryption import encrypt_field, encrypt_packed, encrypt_record
from FieldSecurity.metrics import configure_metrics, get_decode_metrics_snapshot
from FieldSecurity.safe_decode import (
    DecodeResult,
    DecodeStatus,
    decode_record,
    encode_placeholder,
    is_placeholder,
    safe_decode,
    safe_decode_value,
    safe_decrypt_packed,
)
from FieldSecurity.security_config import DecodeMode


def test_absent_ciphertext_returns_none(key):
    assert safe_decode(None, "anything", key) == DecodeResult(None, DecodeStatus.ABSENT)
    assert safe_decode_value(None, None, key) is None
    assert safe_decode("", "iv", key).status is DecodeStatus.ABSENT


@pytest.mark.parametrize("iv", [None, "", "garbage", "AAAAAAAAAAAAAAAA"])
def test_placeholder_short_circuits_before_decrypt(key, other_key, iv):
    for k in (key, other_key):
        result = safe_decode("enc_Dra_Maria_Garcia", iv, k, mode=DecodeMode.STRICT)
        assert result == DecodeResult("Dra Maria Garcia", DecodeStatus.PLACEHOLDER)
        assert not result.degraded


def test_placeholder_only_strips_leading_prefix(key):
    assert safe_decode_value("enc_lab_enc_panel", None, key) == "lab enc panel"


def test_encode_placeholder_matches_decode(key):
    seeded = encode_placeholder("Dr Luis Torres")
    assert seeded == "enc_Dr_Luis_Torres"
    assert is_placeholder(seeded)
    assert not is_placeholder(None)
    assert safe_decode_value(seeded, None, key) == "Dr Luis Torres"


def test_real_ciphertext_is_decrypted(key):
    encrypted = encrypt_field("Juan Pérez", key)
    result = safe_decode(encrypted.ciphertext, encrypted.iv, key)
    assert result == DecodeResult("Juan Pérez", DecodeStatus.DECRYPTED)


def test_plaintext_that_looks_like_placeholder_survives_encryption(key):
    encrypted = encrypt_field("enc_not_a_placeholder", key)
    assert safe_decode_value(encrypted.ciphertext, encrypted.iv, key) == "enc_not_a_placeholder"


def test_missing_iv_returns_raw_ciphertext(key):
    encrypted = encrypt_field("Juan Pérez", key)
    result = safe_decode(encrypted.ciphertext, None, key)
    assert result.value == encrypted.ciphertext
    assert result.status is DecodeStatus.RAW
    assert result.degraded


def test_wrong_key_degrades_to_raw(key, other_key):
    encrypted = encrypt_field("Juan Pérez", key)
    result = safe_decode(encrypted.ciphertext, encrypted.iv, other_key)
    assert result == DecodeResult(encrypted.ciphertext, DecodeStatus.RAW)


def test_legacy_plaintext_with_iv_degrades_to_raw(key):
    assert safe_decode_value("Maria Lopez", "AAAAAAAAAAAAAAAA", key) == "Maria Lopez"


def test_strict_mode_raises_instead_of_degrading(key, other_key):
    encrypted = encrypt_field("Juan Pérez", key)
    with pytest.raises(DecryptionError):
        safe_decode(encrypted.ciphertext, encrypted.iv, other_key, mode=DecodeMode.STRICT)
    with pytest.raises(DecryptionError):
        safe_decode(encrypted.ciphertext, None, key, mode=DecodeMode.STRICT)


def test_degraded_read_is_logged_without_value(key, other_key, caplog):
    encrypted = encrypt_field("Juan Pérez", key)
    with caplog.at_level(logging.WARNING, logger="security.crypto"):
        safe_decode(encrypted.ciphertext, encrypted.iv, other_key, field="patients.name")

    messages = [r.getMessage() for r in caplog.records if r.name == "security.crypto"]
    assert any("field=patients.name" in m for m in messages)
    assert not any("Juan" in m or encrypted.ciphertext in m for m in messages)


def test_decode_outcomes_are_counted(key):
    configure_metrics(True)
    before = get_decode_metrics_snapshot(["placeholder", "raw"])
    safe_decode("enc_Ana", None, key)
    safe_decode("stored-text", None, key)
    after = get_decode_metrics_snapshot(["placeholder", "raw"])
    assert after["placeholder"] == before["placeholder"] + 1
    assert after["raw"] == before["raw"] + 1


def test_packed_values(key, other_key):
    packed = encrypt_packed("LIC-998877", key)
    assert safe_decrypt_packed(packed, key) == DecodeResult("LIC-998877", DecodeStatus.DECRYPTED)
    assert safe_decrypt_packed(packed, other_key).value == packed
    assert safe_decrypt_packed(None, key).status is DecodeStatus.ABSENT


@pytest.mark.parametrize(
    "stored",
    ["maria.lopez@clinica.mx", '{"dose": 2.5}', "plain text", "ab.cd"],
)
def test_packed_plaintext_is_returned_unchanged(key, stored):
    result = safe_decrypt_packed(stored, key, mode=DecodeMode.STRICT)
    assert result == DecodeResult(stored, DecodeStatus.RAW)


def test_packed_placeholder(key):
    assert safe_decrypt_packed("enc_Dr._Luis_Torres", key).value == "Dr. Luis Torres"


def test_packed_strict_mode_raises_on_bad_ciphertext(key, other_key):
    packed = encrypt_packed("LIC-998877", key)
    with pytest.raises(DecryptionError):
        safe_decrypt_packed(packed, other_key, mode=DecodeMode.STRICT)


def test_decode_record_reads_sibling_columns(key):
    stored = encrypt_record({"id": 1, "name": "Ana Ruiz"}, ["name"], key)
    stored["allergies_encrypted"] = "enc_Penicilina"
    stored["allergies_iv"] = None

    decoded = decode_record(stored, ["name", "allergies", "notes"], key)

    assert decoded["name"] == DecodeResult("Ana Ruiz", DecodeStatus.DECRYPTED)
    assert decoded["allergies"] == DecodeResult("Penicilina", DecodeStatus.PLACEHOLDER)
    assert decoded["notes"].status is DecodeStatus.ABSENT


def test_packed_iv_with_trailing_newline_is_plaintext(key):
    stored = "AAAAAAAAAAAAAAAA\n.notcipher"
    result = safe_decrypt_packed(stored, key, mode=DecodeMode.STRICT)
    assert result == DecodeResult(stored, DecodeStatus.RAW)
