import enum
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import DecodeError, EncodeError

PKCS1V15_OVERHEAD = 11

log = logging.getLogger(__name__)


class KeySlot(enum.Enum):
    """Which half of a keypair an operation concerns."""

    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def coerce(cls, value: Union["KeySlot", str]) -> "KeySlot":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ValueError("Invalid key slot. Must be 'public' or 'private'.") from e


@dataclass(frozen=True)
class BlockSizePolicy:
    """Segment sizes derived from the modulus bit length."""

    key_size: int
    overhead: int = PKCS1V15_OVERHEAD

    def __post_init__(self):
        if self.plaintext_block_size <= 0:
            raise ValueError(
                f"Key size {self.key_size} leaves no room for {self.overhead} bytes of padding."
            )

    @property
    def modulus_bytes(self) -> int:
        return (self.key_size + 7) // 8

    @property
    def plaintext_block_size(self) -> int:
        return self.modulus_bytes - self.overhead

    @property
    def ciphertext_block_size(self) -> int:
        return self.modulus_bytes


class RSATransform:
    """RSA PKCS#1 v1.5 encrypt or decrypt operation bound to one key.

    Instances are immutable once built so a transform can be shared by
    concurrent callers; a key reload builds a new transform instead.
    """

    __slots__ = ("_slot", "_key", "_policy", "_padding")

    def __init__(self, key: Union[rsa.RSAPublicKey, rsa.RSAPrivateKey], slot: KeySlot):
        if slot is KeySlot.PUBLIC and not isinstance(key, rsa.RSAPublicKey):
            raise TypeError("Encrypt transform requires an RSA public key.")
        if slot is KeySlot.PRIVATE and not isinstance(key, rsa.RSAPrivateKey):
            raise TypeError("Decrypt transform requires an RSA private key.")
        object.__setattr__(self, "_slot", slot)
        object.__setattr__(self, "_key", key)
        object.__setattr__(self, "_policy", BlockSizePolicy(key.key_size))
        object.__setattr__(self, "_padding", padding.PKCS1v15())

    def __setattr__(self, name, value):
        raise AttributeError("RSATransform is immutable")

    def __repr__(self):
        mode = "encrypt" if self._slot is KeySlot.PUBLIC else "decrypt"
        return f"<RSATransform {mode} key_size={self._policy.key_size}>"

    @property
    def slot(self) -> KeySlot:
        return self._slot

    @property
    def key(self):
        return self._key

    @property
    def policy(self) -> BlockSizePolicy:
        return self._policy

    @property
    def block_size(self) -> int:
        """Input stride: plaintext block size when encrypting, modulus size when decrypting."""
        if self._slot is KeySlot.PUBLIC:
            return self._policy.plaintext_block_size
        return self._policy.ciphertext_block_size

    def apply(self, segment: bytes) -> bytes:
        if self._slot is KeySlot.PUBLIC:
            return self._key.encrypt(segment, self._padding)
        return self._key.decrypt(segment, self._padding)


def encrypt_transform(public_key: rsa.RSAPublicKey) -> RSATransform:
    return RSATransform(public_key, KeySlot.PUBLIC)


def decrypt_transform(private_key: rsa.RSAPrivateKey) -> RSATransform:
    return RSATransform(private_key, KeySlot.PRIVATE)


def segment_count(length: int, block_size: int) -> int:
    return -(-length // block_size)


def iter_segments(data: bytes, block_size: int) -> Iterator[Tuple[int, bytes]]:
    """Yield ``(index, segment)`` pairs; the last segment may be short."""
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    view = memoryview(data)
    for index, offset in enumerate(range(0, len(data), block_size)):
        yield index, bytes(view[offset:offset + block_size])


def _run(transform: RSATransform, data: bytes, block_size: int, error_cls) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("data must be bytes")

    out = bytearray()
    for index, segment in iter_segments(data, block_size):
        try:
            out += transform.apply(segment)
        except (ValueError, TypeError) as e:
            raise error_cls(transform.slot, index, index * block_size) from e
    log.debug("%s %d bytes in %d segment(s)", error_cls.action, len(data),
              segment_count(len(data), block_size))
    return bytes(out)


def encode(transform: RSATransform, plaintext: bytes, block_size: Optional[int] = None) -> bytes:
    """Encrypt *plaintext* segment by segment and concatenate the ciphertext blocks.

    Each segment holds at most ``block_size`` bytes (the transform's
    plaintext block size by default) and becomes one modulus-sized block.
    Raises EncodeError if any segment is rejected; nothing is returned then.
    """
    if transform.slot is not KeySlot.PUBLIC:
        raise ValueError("encode requires an encrypt transform")
    if block_size is None:
        block_size = transform.block_size
    return _run(transform, plaintext, block_size, EncodeError)


def decode(transform: RSATransform, ciphertext: bytes, block_size: Optional[int] = None) -> bytes:
    """Decrypt *ciphertext* produced by :func:`encode`.

    The stride defaults to the modulus size. A trailing partial block
    raises DecodeError. Corrupted blocks or a mismatched key are not
    reliably detected here: with OpenSSL's implicit rejection for
    PKCS#1 v1.5 the primitive returns random bytes instead of failing.
    Use :func:`rsacert_crypto.certificate.decode_text` for text, which
    raises TextDecodeError on such output.
    """
    if transform.slot is not KeySlot.PRIVATE:
        raise ValueError("decode requires a decrypt transform")
    if block_size is None:
        block_size = transform.block_size
    return _run(transform, ciphertext, block_size, DecodeError)
