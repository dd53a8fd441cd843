import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from rsacert_crypto import (
    KeyGenerationError,
    KeyParseError,
    KeySlot,
    KeyStore,
    generate,
    load,
    serialize,
)
from rsacert_crypto.keys import is_pem, slot_of


def test_generate_returns_matched_pair(keystore):
    assert isinstance(keystore, KeyStore)
    assert keystore.key_size == 1024
    assert keystore.public_key.key_size == 1024
    assert (keystore.private_key.public_key().public_numbers()
            == keystore.public_key.public_numbers())


def test_generate_rejects_small_key_size():
    with pytest.raises(KeyGenerationError) as excinfo:
        generate(key_size=256)
    assert excinfo.value.key_size == 256
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_generate_rejects_bad_exponent():
    with pytest.raises(KeyGenerationError) as excinfo:
        generate(public_exponent=4)
    assert excinfo.value.public_exponent == 4


def test_serialize_uses_der(keystore):
    private_der = serialize(keystore.private_key)
    public_der = serialize(keystore.public_key)
    assert private_der[:1] == b"\x30"
    assert public_der[:1] == b"\x30"
    assert private_der == keystore.private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    assert public_der == keystore.public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.mark.parametrize("slot", [KeySlot.PUBLIC, KeySlot.PRIVATE])
def test_loaded_key_behaves_like_original(keystore, slot):
    original = keystore.get(slot)
    loaded = load(serialize(original), slot)
    assert slot_of(loaded) is slot

    if slot is KeySlot.PUBLIC:
        store = KeyStore(public_key=loaded, private_key=keystore.private_key)
    else:
        store = KeyStore(public_key=keystore.public_key, private_key=loaded)
    message = b"persisted" * 40
    assert store.decrypt(store.encrypt(message)) == message
    assert keystore.decrypt(store.encrypt(message)) == message
    assert store.decrypt(keystore.encrypt(message)) == message


def test_load_accepts_pem(keystore):
    pem = serialize(keystore.public_key, serialization.Encoding.PEM)
    assert is_pem(pem)
    key = load(pem, "public")
    assert key.public_numbers() == keystore.public_key.public_numbers()


def test_load_public_bytes_as_private_fails(keystore):
    with pytest.raises(KeyParseError) as excinfo:
        load(serialize(keystore.public_key), KeySlot.PRIVATE)
    assert excinfo.value.slot is KeySlot.PRIVATE


def test_load_private_bytes_as_public_fails(keystore):
    with pytest.raises(KeyParseError) as excinfo:
        load(serialize(keystore.private_key), KeySlot.PUBLIC)
    assert excinfo.value.slot is KeySlot.PUBLIC


@pytest.mark.parametrize("data", [b"", b"not a key", b"\x30\x03\x02\x01\x00"])
def test_load_malformed_data_fails(data):
    with pytest.raises(KeyParseError):
        load(data, KeySlot.PUBLIC)


def test_load_non_bytes_fails():
    with pytest.raises(KeyParseError):
        load("-----BEGIN PUBLIC KEY-----", KeySlot.PUBLIC)


def test_load_rejects_non_rsa_key():
    ec_public = ec.generate_private_key(ec.SECP256R1()).public_key()
    data = ec_public.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    with pytest.raises(KeyParseError) as excinfo:
        load(data, KeySlot.PUBLIC)
    assert "not an RSA key" in str(excinfo.value)


def test_slot_of_rejects_other_objects():
    with pytest.raises(TypeError):
        slot_of(object())
