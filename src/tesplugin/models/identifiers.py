"""Type codes and form IDs: the two identifier types used throughout a plugin."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class TypeCode:
    """A 4-byte ASCII signature (e.g. 'TES4', 'GRUP', 'KYWD', 'EDID')."""
    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != 4:
            raise ValueError(f"TypeCode must be exactly 4 bytes, got {self.raw!r}")

    @classmethod
    def from_str(cls, text: str) -> "TypeCode":
        # Non-ASCII text raises UnicodeEncodeError, itself a ValueError.
        return cls(text.encode("ascii"))

    @classmethod
    def coerce(cls, value: "TypeCode | str | bytes") -> "TypeCode":
        if isinstance(value, TypeCode):
            return value
        if isinstance(value, str):
            return cls.from_str(value)
        return cls(bytes(value))

    def __str__(self) -> str:
        return self.raw.decode("ascii", errors="backslashreplace")

    def __repr__(self) -> str:
        return f"TypeCode({str(self)!r})"


@dataclass(frozen=True, slots=True, order=True)
class FormId:
    """A 32-bit record identifier.

    The top byte is the load-order index of the owning master; the low 24
    bits identify the record inside that master. Never resolved here.
    """
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF_FFFF:
            raise ValueError(f"FormId out of 32-bit range: {self.value}")

    @property
    def master_index(self) -> int:
        return self.value >> 24

    @property
    def object_index(self) -> int:
        return self.value & 0x00FF_FFFF

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"0x{self.value:08X}"

    def __repr__(self) -> str:
        return f"FormId({self})"


FILE_HEADER_CODE = TypeCode(b"TES4")
GROUP_CODE = TypeCode(b"GRUP")
EDITOR_ID_CODE = TypeCode(b"EDID")
GAME_SETTING_CODE = TypeCode(b"GMST")
KEYWORD_CODE = TypeCode(b"KYWD")
