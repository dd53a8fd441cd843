from concurrent.futures import ThreadPoolExecutor

import pytest

from rsacert_crypto import (
    KeySlot,
    KeyStore,
    NoPrivateKeyError,
    NoPublicKeyError,
    TransformCache,
    decode,
    generate,
)


@pytest.fixture
def store(keystore):
    return KeyStore(public_key=keystore.public_key, private_key=keystore.private_key)


def test_empty_store_has_no_keys():
    store = KeyStore()
    assert store.key_size == 1024
    assert store.get(KeySlot.PUBLIC) is None
    assert store.get("private") is None


def test_encrypt_without_public_key():
    with pytest.raises(NoPublicKeyError) as excinfo:
        KeyStore().encrypt(b"data")
    assert excinfo.value.slot is KeySlot.PUBLIC


def test_decrypt_without_private_key():
    with pytest.raises(NoPrivateKeyError) as excinfo:
        KeyStore().decrypt(b"\x00" * 128)
    assert excinfo.value.slot is KeySlot.PRIVATE


def test_transforms_are_cached(store):
    assert store.encrypt_transform() is store.encrypt_transform()
    assert store.decrypt_transform() is store.decrypt_transform()


def test_transforms_are_built_lazily(store):
    assert not store.cache.is_ready(KeySlot.PUBLIC)
    store.encrypt_transform()
    assert store.cache.is_ready(KeySlot.PUBLIC)
    assert not store.cache.is_ready(KeySlot.PRIVATE)


def test_set_invalidates_only_its_slot(store, other_keystore):
    enc = store.encrypt_transform()
    dec = store.decrypt_transform()

    store.set(KeySlot.PUBLIC, other_keystore.public_key)

    assert not store.cache.is_ready(KeySlot.PUBLIC)
    assert store.cache.is_ready(KeySlot.PRIVATE)
    new_enc = store.encrypt_transform()
    assert new_enc is not enc
    assert new_enc.key is other_keystore.public_key
    assert store.decrypt_transform() is dec


def test_old_transform_stays_usable_after_reload(store, keystore, other_keystore):
    old_enc = store.encrypt_transform()
    store.set("public", other_keystore.public_key)
    assert old_enc.key is keystore.public_key
    ciphertext = store.encrypt(b"after reload")
    assert other_keystore.decrypt(ciphertext) == b"after reload"


def test_set_rejects_key_of_wrong_slot(keystore):
    store = KeyStore()
    with pytest.raises(TypeError):
        store.set(KeySlot.PUBLIC, keystore.private_key)
    with pytest.raises(TypeError):
        store.set(KeySlot.PRIVATE, keystore.public_key)
    assert store.public_key is None
    assert store.private_key is None


def test_set_rejects_unknown_slot(keystore):
    with pytest.raises(ValueError):
        KeyStore().set("secret", keystore.public_key)


def test_store_does_not_validate_pairing(keystore, other_keystore):
    store = KeyStore(public_key=keystore.public_key, private_key=other_keystore.private_key)
    assert store.public_key is keystore.public_key
    assert store.private_key is other_keystore.private_key


def test_cache_rebuilds_for_a_different_key(keystore, other_keystore):
    cache = TransformCache()
    first = cache.get_encrypt_transform(keystore.public_key)
    second = cache.get_encrypt_transform(other_keystore.public_key)
    assert first is not second
    assert second.key is other_keystore.public_key


def test_cache_missing_keys():
    cache = TransformCache()
    with pytest.raises(NoPublicKeyError):
        cache.get_encrypt_transform(None)
    with pytest.raises(NoPrivateKeyError):
        cache.get_decrypt_transform(None)


def test_concurrent_first_use_builds_one_transform(keystore):
    store = KeyStore(private_key=keystore.private_key)
    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: store.decrypt_transform(), range(32)))
    assert all(t is results[0] for t in results)


def test_store_round_trip(store):
    ciphertext = store.encrypt(b"hello store")
    assert decode(store.decrypt_transform(), ciphertext) == b"hello store"


def test_set_tracks_key_size(keystore):
    bigger = generate(2048)
    store = KeyStore(public_key=keystore.public_key)
    assert store.key_size == 1024
    store.set(KeySlot.PUBLIC, bigger.public_key)
    assert store.key_size == 2048


def test_require_reports_missing_slot(keystore):
    store = KeyStore(public_key=keystore.public_key)
    assert store.require("public") is keystore.public_key
    with pytest.raises(NoPrivateKeyError):
        store.require(KeySlot.PRIVATE)
