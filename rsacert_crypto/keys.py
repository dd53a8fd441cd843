import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .codec import KeySlot
from .errors import KeyGenerationError, KeyParseError
from .store import DEFAULT_KEY_SIZE, KeyStore, RSAKey

DEFAULT_PUBLIC_EXPONENT = 65537

_PEM_MARKER = b"-----BEGIN"

log = logging.getLogger(__name__)


def generate(key_size: int = DEFAULT_KEY_SIZE, public_exponent: int = DEFAULT_PUBLIC_EXPONENT) -> KeyStore:
    """Generate a fresh keypair and return a KeyStore holding both halves."""
    try:
        private_key = rsa.generate_private_key(public_exponent=public_exponent, key_size=key_size)
    except (ValueError, TypeError) as e:
        raise KeyGenerationError(key_size, public_exponent) from e
    log.debug("generated %d-bit rsa keypair", key_size)
    return KeyStore(key_size, public_key=private_key.public_key(), private_key=private_key)


def slot_of(key: RSAKey) -> KeySlot:
    if isinstance(key, rsa.RSAPrivateKey):
        return KeySlot.PRIVATE
    if isinstance(key, rsa.RSAPublicKey):
        return KeySlot.PUBLIC
    raise TypeError(f"Not an RSA key: {type(key).__name__}")


def is_pem(data: bytes) -> bool:
    return data.lstrip().startswith(_PEM_MARKER)


def load(data: bytes, slot: Union[KeySlot, str]) -> RSAKey:
    """Parse an encoded key for *slot*.

    Private keys are PKCS#8 DER, public keys SubjectPublicKeyInfo DER.
    PEM armoured input is accepted as well.
    """
    slot = KeySlot.coerce(slot)
    if not isinstance(data, (bytes, bytearray)):
        raise KeyParseError(slot, "key data must be bytes")
    data = bytes(data)
    pem = is_pem(data)
    try:
        if slot is KeySlot.PRIVATE:
            loader = serialization.load_pem_private_key if pem else serialization.load_der_private_key
            key = loader(data, password=None)
        else:
            loader = serialization.load_pem_public_key if pem else serialization.load_der_public_key
            key = loader(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(slot) from e

    if _slot_of_or_none(key) is not slot:
        raise KeyParseError(slot, f"not an RSA key ({type(key).__name__})")
    log.debug("loaded %d-bit rsa %s key (%s)", key.key_size, slot.value, "PEM" if pem else "DER")
    return key


def _slot_of_or_none(key):
    try:
        return slot_of(key)
    except TypeError:
        return None


def serialize(key: RSAKey, encoding: serialization.Encoding = serialization.Encoding.DER) -> bytes:
    """Encode *key* as PKCS#8 (private) or SubjectPublicKeyInfo (public)."""
    if slot_of(key) is KeySlot.PRIVATE:
        return key.private_bytes(
            encoding=encoding,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    return key.public_bytes(
        encoding=encoding,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
