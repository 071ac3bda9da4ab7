"""
wallet_address.py — Fractal Global wallet address

================================================================================
FORMAT
================================================================================

A wallet address is WALLET_ADDRESS_LEN raw bytes, the first of which is
always 0x00 (reserved for future versioning). Its text form is:

    "fr" + base58(raw bytes ++ 2 checksum bytes)

The checksum is an XOR chain over the raw bytes:

    c0 = c1 = 0
    for b in raw:
        c0 ^= b
        c1 ^= c0

It is not cryptographic: it only catches typing mistakes. It is part of the
wire format and must be kept bit for bit.

    >>> str(WalletAddress.from_data(bytes(7)))
    'fr111111111'

================================================================================
TRUSTED VS UNTRUSTED INPUT
================================================================================

from_data() is for bytes the program already trusts (its own storage).
Anything typed by a user or received from another system goes through
parse(), which verifies the tag, the encoding and the checksum.

The raw bytes carry no verification at all: use them as a compact storage
key, never as an input or output format.

================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

import base58
from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


logger = logging.getLogger(__name__)


# ==============================================================================
# CONSTANTS
# ==============================================================================

# Length in bytes of a wallet address. Changing it is a format version bump.
WALLET_ADDRESS_LEN: Final[int] = 7

# Literal prefix of every address text.
WALLET_ADDRESS_TAG: Final[str] = "fr"

CHECKSUM_LEN: Final[int] = 2

RESERVED_BYTE: Final[int] = 0x00

_ALPHABET: Final[str] = base58.BITCOIN_ALPHABET.decode("ascii")


def checksum(data: bytes) -> bytes:
    """
    XOR chain checksum of the given bytes.

        >>> checksum(bytes([0x00, 0x11, 0x2A, 0x44, 0xCD, 0xFF, 0xE0])).hex()
        'ad07'
    """
    c0 = c1 = 0
    for byte in data:
        c0 ^= byte
        c1 ^= c0
    return bytes((c0, c1))


# ==============================================================================
# ERRORS
# ==============================================================================

class InvalidBase58Character(ValueError):
    """A character outside the base-58 alphabet, with its position."""

    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        ValueError.__init__(
            self, f"invalid base-58 character {character!r} at position {position}"
        )

    def with_offset(self, offset: int) -> InvalidBase58Character:
        return InvalidBase58Character(self.character, self.position + offset)


def _b58decode(text: str) -> bytes:
    # b58decode() strips trailing whitespace and reports no position.
    for position, character in enumerate(text):
        if character not in _ALPHABET:
            raise InvalidBase58Character(character, position)
    return base58.b58decode(text)


class WalletAddressParseErrorKind(Enum):
    """Reasons for which a string is not a valid wallet address."""
    MISSING_TAG = (
        "missing_tag",
        f'the address does not start with "{WALLET_ADDRESS_TAG}"',
    )
    INVALID_BASE58 = (
        "invalid_base58",
        "the address is not a valid base-58 encoded string",
    )
    INVALID_TAG_BYTE = (
        "invalid_tag_byte",
        "the first byte of the address is not 0x00",
    )
    CHECKSUM_MISMATCH = (
        "checksum_mismatch",
        "checksum verification failed",
    )

    def __init__(self, code: str, reason: str):
        self._code = code
        self._reason = reason

    @property
    def code(self) -> str:
        return self._code

    @property
    def reason(self) -> str:
        return self._reason


class WalletAddressParseError(ValueError):
    """
    Wallet address parsing error.

    Carries the rejected text, the kind of failure and a human readable
    message. Base-58 failures chain an InvalidBase58Character as
    ``__cause__``, positioned in the full text (tag included).
    """

    def __init__(
        self,
        text: str,
        kind: WalletAddressParseErrorKind,
        detail: Optional[str] = None,
    ):
        reason = kind.reason if detail is None else f"{kind.reason}: {detail}"
        self.text = text
        self.kind = kind
        self.message = (
            f"the wallet address {text!r} is not a valid Fractal Global wallet address, {reason}"
        )
        ValueError.__init__(self, self.message)


def _reject(
    text: str, kind: WalletAddressParseErrorKind, detail: Optional[str] = None
) -> WalletAddressParseError:
    logger.debug("rejected wallet address %r (%s)", text, kind.code)
    return WalletAddressParseError(text, kind, detail)


# ==============================================================================
# WALLET ADDRESS
# ==============================================================================

@dataclass(frozen=True, slots=True, order=True)
class WalletAddress:
    """
    Checksummed wallet address.

    INVARIANTS:
    1. _data is always bytes of length WALLET_ADDRESS_LEN
    2. _data[0] == 0x00
    3. WalletAddress.parse(str(a)) == a

    Building one from raw bytes that break 1 or 2 is a programming error and
    raises ValueError, never WalletAddressParseError.
    """
    _data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self._data, bytes):
            raise TypeError(
                f"A wallet address is built from bytes, not {type(self._data).__name__}"
            )
        if len(self._data) != WALLET_ADDRESS_LEN:
            raise ValueError(
                f"A wallet address is {WALLET_ADDRESS_LEN} bytes long, got: {len(self._data)}"
            )
        if self._data[0] != RESERVED_BYTE:
            raise ValueError(
                "the provided address is not a correct Fractal Global wallet address, "
                f"its first byte should be 0x00, got: 0x{self._data[0]:02X}"
            )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_data(cls, data: bytes) -> WalletAddress:
        """
        Creates a wallet address from trusted raw data.

        Only for bytes already known to be correct, or it could lead to a
        false address. Raises ValueError if the first byte is not 0x00.
        """
        if isinstance(data, int):
            raise TypeError("A wallet address is built from a byte sequence, not an int")
        return cls(bytes(data))

    @classmethod
    def parse(cls, text: str) -> WalletAddress:
        """
        Parses and verifies an address text such as ``"fr111111111"``.

        Raises:
            WalletAddressParseError: on a missing tag, a bad base-58
                character, a wrong reserved byte or a checksum mismatch
        """
        if not isinstance(text, str):
            raise TypeError(
                f"Only strings can be parsed as wallet addresses, not {type(text).__name__}"
            )
        if not text.startswith(WALLET_ADDRESS_TAG):
            raise _reject(text, WalletAddressParseErrorKind.MISSING_TAG)

        try:
            decoded = _b58decode(text[len(WALLET_ADDRESS_TAG):])
        except InvalidBase58Character as e:
            error = e.with_offset(len(WALLET_ADDRESS_TAG))
            raise _reject(text, WalletAddressParseErrorKind.INVALID_BASE58, str(error)) from error

        if len(decoded) < WALLET_ADDRESS_LEN + CHECKSUM_LEN or decoded[0] != RESERVED_BYTE:
            raise _reject(text, WalletAddressParseErrorKind.INVALID_TAG_BYTE)

        data = decoded[:WALLET_ADDRESS_LEN]
        if decoded[WALLET_ADDRESS_LEN:WALLET_ADDRESS_LEN + CHECKSUM_LEN] != checksum(data):
            raise _reject(text, WalletAddressParseErrorKind.CHECKSUM_MISMATCH)
        return cls(data)

    # -------------------------------------------------------------------------
    # Properties and output
    # -------------------------------------------------------------------------

    @property
    def raw(self) -> bytes:
        """
        The raw address bytes.

        Useful as a compact database key. No checksum nor any other
        verification is attached.
        """
        return self._data

    def get_raw(self) -> bytes:
        return self._data

    @property
    def checksum(self) -> bytes:
        return checksum(self._data)

    def __str__(self) -> str:
        encoded = base58.b58encode(self._data + checksum(self._data)).decode("ascii")
        return f"{WALLET_ADDRESS_TAG}{encoded}"

    def __repr__(self) -> str:
        return f"WalletAddress({str(self)!r})"

    # -------------------------------------------------------------------------
    # Pydantic integration
    # -------------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Accepts a WalletAddress or its text form, serializes to the text form."""
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            json_schema_input_schema=core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def _coerce(cls, value: Any) -> WalletAddress:
        if isinstance(value, WalletAddress):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        raise ValueError(f"Cannot build a WalletAddress from {type(value).__name__}")
