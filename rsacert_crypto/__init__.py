"""
Chunked RSA (PKCS#1 v1.5) encryption of byte payloads of any length.

High-level API:
- RSACertificate(key_size=1024) -> certificate with a freshly generated keypair
- RSACertificate.from_file(path, slot) / from_stream(stream, slot) / from_bytes(data, slot)
- RSACertificate.encode(message: str) -> bytes, decode(data) -> str
- RSACertificate.encode_data(data) -> bytes, decode_data(data) -> bytes
- encode_text(store, message) -> bytes, decode_text(store, data) -> str
- RSACertificate.save_key(destination, slot), load_key(source, slot)
- encrypt_file(input_path, output_path=None, public_key_path=...) -> output_path
- decrypt_file(input_path, output_path=None, private_key_path=...) -> output_path

Lower level:
- generate(key_size) -> KeyStore, load(data, slot) -> key, serialize(key) -> bytes
- encode(transform, plaintext), decode(transform, ciphertext)

Keys travel as DER (PKCS#8 private, SubjectPublicKeyInfo public); PEM is
accepted on load. Exceptions derive from RSACertificateError.
"""

from .certificate import RSACertificate, decode_text, decrypt_file, encode_text, encrypt_file
from .codec import (
    PKCS1V15_OVERHEAD,
    BlockSizePolicy,
    KeySlot,
    RSATransform,
    decode,
    decrypt_transform,
    encode,
    encrypt_transform,
)
from .errors import (
    CodecError,
    DecodeError,
    EncodeError,
    KeyGenerationError,
    KeyParseError,
    MissingKeyError,
    NoPrivateKeyError,
    NoPublicKeyError,
    RSACertificateError,
    TextDecodeError,
)
from .fileio import read_all, write_all
from .keys import DEFAULT_PUBLIC_EXPONENT, generate, load, serialize
from .store import DEFAULT_KEY_SIZE, KeyStore, TransformCache

__all__ = [
    "RSACertificate",
    "encrypt_file",
    "decrypt_file",
    "encode_text",
    "decode_text",
    "generate",
    "load",
    "serialize",
    "KeyStore",
    "TransformCache",
    "KeySlot",
    "BlockSizePolicy",
    "RSATransform",
    "encrypt_transform",
    "decrypt_transform",
    "encode",
    "decode",
    "read_all",
    "write_all",
    "RSACertificateError",
    "KeyGenerationError",
    "KeyParseError",
    "MissingKeyError",
    "NoPublicKeyError",
    "NoPrivateKeyError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    "TextDecodeError",
    "DEFAULT_KEY_SIZE",
    "DEFAULT_PUBLIC_EXPONENT",
    "PKCS1V15_OVERHEAD",
]
