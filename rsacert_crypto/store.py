import logging
import threading
from typing import Dict, NamedTuple, Optional, Union

from cryptography.hazmat.primitives.asymmetric import rsa

from .codec import (
    KeySlot,
    RSATransform,
    decode,
    decrypt_transform,
    encode,
    encrypt_transform,
)
from .errors import NoPrivateKeyError, NoPublicKeyError

DEFAULT_KEY_SIZE = 1024

RSAKey = Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]

log = logging.getLogger(__name__)

_KEY_TYPES = {
    KeySlot.PUBLIC: rsa.RSAPublicKey,
    KeySlot.PRIVATE: rsa.RSAPrivateKey,
}
_FACTORIES = {
    KeySlot.PUBLIC: encrypt_transform,
    KeySlot.PRIVATE: decrypt_transform,
}
_MISSING = {
    KeySlot.PUBLIC: NoPublicKeyError,
    KeySlot.PRIVATE: NoPrivateKeyError,
}


class _Ready(NamedTuple):
    key: RSAKey
    transform: RSATransform


class TransformCache:
    """One lazily built transform per key slot.

    A slot is either uninitialized (absent from ``_ready``) or ready with
    the key it was built for. Only ``invalidate`` moves a slot back to
    uninitialized; it swaps the entry out and never touches the old
    transform, so callers still holding it can finish.
    """

    def __init__(self):
        self._ready: Dict[KeySlot, _Ready] = {}
        self._locks = {slot: threading.Lock() for slot in KeySlot}

    def is_ready(self, slot: KeySlot) -> bool:
        return slot in self._ready

    def invalidate(self, slot: KeySlot) -> None:
        with self._locks[slot]:
            self._ready.pop(slot, None)

    def get_encrypt_transform(self, public_key: Optional[rsa.RSAPublicKey]) -> RSATransform:
        return self._get(KeySlot.PUBLIC, public_key)

    def get_decrypt_transform(self, private_key: Optional[rsa.RSAPrivateKey]) -> RSATransform:
        return self._get(KeySlot.PRIVATE, private_key)

    def _get(self, slot: KeySlot, key: Optional[RSAKey]) -> RSATransform:
        if key is None:
            raise _MISSING[slot](slot)
        entry = self._ready.get(slot)
        if entry is not None and entry.key is key:
            return entry.transform
        with self._locks[slot]:
            entry = self._ready.get(slot)
            if entry is None or entry.key is not key:
                log.debug("building %s key transform", slot.value)
                entry = _Ready(key, _FACTORIES[slot](key))
                self._ready[slot] = entry
            return entry.transform


class KeyStore:
    """Holds an optional public key and an optional private key.

    The two slots are independent. Nothing checks that a stored private
    key and public key belong to the same pair; that is up to the caller.
    """

    def __init__(self, key_size: int = DEFAULT_KEY_SIZE,
                 public_key: Optional[rsa.RSAPublicKey] = None,
                 private_key: Optional[rsa.RSAPrivateKey] = None):
        self.key_size = key_size
        self._keys: Dict[KeySlot, Optional[RSAKey]] = {slot: None for slot in KeySlot}
        self.cache = TransformCache()
        if public_key is not None:
            self.set(KeySlot.PUBLIC, public_key)
        if private_key is not None:
            self.set(KeySlot.PRIVATE, private_key)

    def __repr__(self):
        filled = [slot.value for slot in KeySlot if self._keys[slot] is not None]
        return f"<KeyStore key_size={self.key_size} slots={filled}>"

    def set(self, slot: Union[KeySlot, str], key: RSAKey) -> None:
        slot = KeySlot.coerce(slot)
        if not isinstance(key, _KEY_TYPES[slot]):
            raise TypeError(f"Expected an RSA {slot.value} key, got {type(key).__name__}.")
        self._keys[slot] = key
        self.key_size = key.key_size
        self.cache.invalidate(slot)

    def get(self, slot: Union[KeySlot, str]) -> Optional[RSAKey]:
        return self._keys[KeySlot.coerce(slot)]

    def require(self, slot: Union[KeySlot, str]) -> RSAKey:
        """Like :meth:`get`, but raises NoPublicKeyError/NoPrivateKeyError for an empty slot."""
        slot = KeySlot.coerce(slot)
        key = self._keys[slot]
        if key is None:
            raise _MISSING[slot](slot)
        return key

    @property
    def public_key(self) -> Optional[rsa.RSAPublicKey]:
        return self._keys[KeySlot.PUBLIC]

    @property
    def private_key(self) -> Optional[rsa.RSAPrivateKey]:
        return self._keys[KeySlot.PRIVATE]

    def encrypt_transform(self) -> RSATransform:
        return self.cache.get_encrypt_transform(self.public_key)

    def decrypt_transform(self) -> RSATransform:
        return self.cache.get_decrypt_transform(self.private_key)

    def encrypt(self, data: bytes) -> bytes:
        return encode(self.encrypt_transform(), data)

    def decrypt(self, data: bytes) -> bytes:
        return decode(self.decrypt_transform(), data)
