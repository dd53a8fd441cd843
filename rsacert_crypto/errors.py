"""Exceptions raised by rsacert_crypto.

Every wrapping raise keeps the underlying failure as ``__cause__``.
``OSError`` from key or payload I/O is never wrapped.
"""

from typing import Optional


class RSACertificateError(Exception):
    """Base exception for all rsacert errors."""


class KeyGenerationError(RSACertificateError):
    """The primitive rejected the keypair parameters."""

    def __init__(self, key_size: int, public_exponent: int):
        self.key_size = key_size
        self.public_exponent = public_exponent
        super().__init__(
            f"Cannot generate rsa key (key_size={key_size}, public_exponent={public_exponent})."
        )


class KeyParseError(RSACertificateError):
    """Data is not a valid encoded RSA key for the requested slot."""

    def __init__(self, slot, reason: str = "malformed key encoding"):
        self.slot = slot
        self.reason = reason
        super().__init__(f"Cannot load rsa {slot.value} key: {reason}.")


class MissingKeyError(RSACertificateError):
    """An operation needed a key slot that is empty."""

    def __init__(self, slot):
        self.slot = slot
        super().__init__(f"Cannot find {slot.value} key!")


class NoPublicKeyError(MissingKeyError):
    pass


class NoPrivateKeyError(MissingKeyError):
    pass


class CodecError(RSACertificateError):
    """A segment was rejected by the transform.

    ``segment_index`` and ``offset`` locate the failing segment in the input.
    """

    action = "process"

    def __init__(self, slot, segment_index: Optional[int], offset: Optional[int],
                 message: Optional[str] = None):
        self.slot = slot
        self.segment_index = segment_index
        self.offset = offset
        if message is None:
            message = (
                f"Cannot {self.action} data: segment {segment_index} at offset {offset} "
                f"rejected by the {slot.value} key transform."
            )
        super().__init__(message)


class EncodeError(CodecError):
    action = "encode"


class DecodeError(CodecError):
    action = "decode"


class TextDecodeError(DecodeError):
    """Decrypted bytes are not valid UTF-8, usually a sign of the wrong private key.

    ``position`` is the index of the first bad byte in the decrypted output;
    ``segment_index`` and ``offset`` are ``None``.
    """

    def __init__(self, slot, position: int):
        self.position = position
        super().__init__(
            slot, None, None,
            f"Decrypted data is not valid utf-8 (first bad byte at {position}); "
            "the private key probably does not match.",
        )
