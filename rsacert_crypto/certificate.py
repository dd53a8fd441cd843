import logging
import os
from typing import BinaryIO, Optional, Union

from cryptography.hazmat.primitives import serialization

from . import keys
from .codec import KeySlot
from .errors import TextDecodeError
from .fileio import PathLike, read_all, write_all
from .store import DEFAULT_KEY_SIZE, KeyStore

log = logging.getLogger(__name__)

SlotLike = Union[KeySlot, str]
Source = Union[PathLike, BinaryIO]


def encode_text(store: KeyStore, message: str) -> bytes:
    return store.encrypt(message.encode('utf-8'))


def decode_text(store: KeyStore, data: bytes) -> str:
    """Decrypt with the private key and decode the result as UTF-8.

    Raises TextDecodeError when the plaintext is not UTF-8, which
    mostly happens when the private key does not match.
    """
    out = store.decrypt(data)
    try:
        return out.decode('utf-8')
    except UnicodeDecodeError as e:
        raise TextDecodeError(KeySlot.PRIVATE, e.start) from e


class RSACertificate:
    """Public/private RSA key holder that encrypts messages of any length.

    The default constructor generates a fresh keypair. Use
    :meth:`from_file`, :meth:`from_stream` or :meth:`from_bytes` to start
    from a single stored key instead, e.g. a receiver that only has the
    private key.

    Public and private keys loaded separately are not checked against
    each other.
    """

    def __init__(self, key_size: int = DEFAULT_KEY_SIZE, *, generate: bool = True):
        if generate:
            self._store = keys.generate(key_size)
        else:
            self._store = KeyStore(key_size)

    @classmethod
    def from_bytes(cls, data: bytes, slot: SlotLike) -> "RSACertificate":
        cert = cls(generate=False)
        cert.load_key_bytes(data, slot)
        return cert

    @classmethod
    def from_file(cls, path: PathLike, slot: SlotLike) -> "RSACertificate":
        cert = cls(generate=False)
        cert.load_key(path, slot)
        return cert

    @classmethod
    def from_stream(cls, stream: BinaryIO, slot: SlotLike) -> "RSACertificate":
        return cls.from_file(stream, slot)

    @property
    def store(self) -> KeyStore:
        return self._store

    @property
    def public_key(self):
        return self._store.public_key

    @property
    def private_key(self):
        return self._store.private_key

    # --- text & bytes ---

    def encode(self, message: str) -> bytes:
        """Encrypt a text message (UTF-8) with the public key."""
        return encode_text(self._store, message)

    def decode(self, data: bytes) -> str:
        return decode_text(self._store, data)

    def encode_data(self, data: bytes) -> bytes:
        return self._store.encrypt(data)

    def decode_data(self, data: bytes) -> bytes:
        return self._store.decrypt(data)

    # --- key persistence ---

    def key_bytes(self, slot: SlotLike, encoding: serialization.Encoding = serialization.Encoding.DER) -> bytes:
        return keys.serialize(self._store.require(slot), encoding)

    def save_key(self, destination: Source, slot: SlotLike,
                 encoding: serialization.Encoding = serialization.Encoding.DER) -> None:
        slot = KeySlot.coerce(slot)
        write_all(destination, self.key_bytes(slot, encoding), private=slot is KeySlot.PRIVATE)
        log.debug("saved %s key to %s", slot.value, destination)

    def load_key_bytes(self, data: bytes, slot: SlotLike) -> None:
        slot = KeySlot.coerce(slot)
        key = keys.load(data, slot)
        self._store.set(slot, key)

    def load_key(self, source: Source, slot: SlotLike) -> None:
        """Load one key from a file path or binary stream into *slot*.

        The store is left untouched when the data cannot be parsed.
        """
        self.load_key_bytes(read_all(source), slot)


# --- File API ---

def encrypt_file(input_path: PathLike, output_path: Optional[PathLike] = None, *, public_key_path: PathLike) -> str:
    if output_path is None:
        output_path = f"{input_path}.enc"
    if os.path.exists(output_path):
        raise FileExistsError(f"Output file '{output_path}' already exists")

    cert = RSACertificate.from_file(public_key_path, KeySlot.PUBLIC)
    write_all(output_path, cert.encode_data(read_all(input_path)))
    return os.fspath(output_path)


def decrypt_file(input_path: PathLike, output_path: Optional[PathLike] = None, *, private_key_path: PathLike) -> str:
    input_path = os.fspath(input_path)
    if output_path is None:
        output_path = input_path[:-4] if input_path.endswith('.enc') else f"{input_path}.dec"
    if os.path.exists(output_path):
        raise FileExistsError(f"Output file '{output_path}' already exists")

    cert = RSACertificate.from_file(private_key_path, KeySlot.PRIVATE)
    write_all(output_path, cert.decode_data(read_all(input_path)))
    return os.fspath(output_path)
