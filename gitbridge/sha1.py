"""Object identifiers."""

import re
from dataclasses import dataclass

from gitbridge.errors import InvalidObjectIDError

ID_RAW_LENGTH = 20
ID_HEX_LENGTH = 40

_FULL_HEX = re.compile(r"[0-9a-fA-F]{40}")


def is_full_hex(value: str) -> bool:
    """Return True if value is exactly 40 hex characters."""
    return bool(_FULL_HEX.fullmatch(value))


@dataclass(frozen=True)
class ObjectID:
    """A 20-byte git object id."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != ID_RAW_LENGTH:
            raise InvalidObjectIDError(
                f"Object id must be {ID_RAW_LENGTH} bytes, got {self.raw!r}"
            )

    @classmethod
    def from_hex(cls, value: str) -> "ObjectID":
        """
        Parse a full 40-character hex id.

        Raises:
            InvalidObjectIDError: If value is not exactly 40 hex characters
        """
        if not is_full_hex(value):
            raise InvalidObjectIDError(f"Invalid object id: {value!r}")
        return cls(bytes.fromhex(value))

    @property
    def hex(self) -> str:
        return self.raw.hex()

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.hex

    def __repr__(self) -> str:
        return f"ObjectID({self.hex})"


def parse_object_id(output: str) -> ObjectID:
    """
    Parse an object id from single-line command output.

    Surrounding whitespace is trimmed and the first 40 characters are used.

    Raises:
        InvalidObjectIDError: If the output does not start with a full id
    """
    trimmed = output.strip()
    if len(trimmed) < ID_HEX_LENGTH:
        raise InvalidObjectIDError(f"Output too short for an object id: {trimmed!r}")
    return ObjectID.from_hex(trimmed[:ID_HEX_LENGTH])
