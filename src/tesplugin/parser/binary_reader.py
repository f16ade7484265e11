"""Low-level binary reader with typed little-endian reads and a moving cursor."""

import struct

from tesplugin.errors import InvalidStringError, TruncatedDataError
from tesplugin.models.identifiers import FormId, TypeCode


class BinaryReader:
    """Wraps a bytes buffer with typed reads and a moving cursor.

    Key design: slice(size) returns a new BinaryReader bounded to the next
    `size` bytes of the same buffer. This lets record and group decoders read
    freely without overrunning into the next record.

    `base` is the file offset of data[0]. Readers built over a subrecord's
    data pass the subrecord's offset so errors still point into the file.
    """

    __slots__ = ("_data", "_pos", "_end", "_base")

    def __init__(self, data: bytes | memoryview, offset: int = 0, end: int | None = None,
                 *, base: int = 0) -> None:
        self._data = data
        self._pos = offset
        self._end = end if end is not None else len(data)
        self._base = base

    @property
    def position(self) -> int:
        return self._pos

    @property
    def absolute_position(self) -> int:
        return self._base + self._pos

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def _check(self, action: str, size: int) -> None:
        if size < 0 or self._pos + size > self._end:
            raise TruncatedDataError(
                f"{action} of {size} bytes at offset {self.absolute_position} "
                f"would exceed boundary at {self._base + self._end}",
                offset=self.absolute_position,
            )

    def _read(self, size: int) -> bytes | memoryview:
        self._check("Read", size)
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def int8(self) -> int:
        return struct.unpack_from("<b", self._read(1))[0]

    def uint8(self) -> int:
        return self._read(1)[0]

    def int16(self) -> int:
        return struct.unpack_from("<h", self._read(2))[0]

    def uint16(self) -> int:
        return struct.unpack_from("<H", self._read(2))[0]

    def int32(self) -> int:
        return struct.unpack_from("<i", self._read(4))[0]

    def uint32(self) -> int:
        return struct.unpack_from("<I", self._read(4))[0]

    def int64(self) -> int:
        return struct.unpack_from("<q", self._read(8))[0]

    def uint64(self) -> int:
        return struct.unpack_from("<Q", self._read(8))[0]

    def float32(self) -> float:
        return struct.unpack_from("<f", self._read(4))[0]

    def float64(self) -> float:
        return struct.unpack_from("<d", self._read(8))[0]

    def type_code(self) -> TypeCode:
        """Read a 4-byte record type signature (e.g. 'KYWD', 'GRUP')."""
        return TypeCode(bytes(self._read(4)))

    def form_id(self) -> FormId:
        return FormId(self.uint32())

    def peek(self, size: int) -> bytes:
        """Return the next `size` bytes without advancing the cursor."""
        self._check("Peek", size)
        return bytes(self._data[self._pos : self._pos + size])

    def view(self, size: int) -> memoryview:
        """Return the next `size` bytes as a view into the shared buffer."""
        self._check("View", size)
        chunk = memoryview(self._data)[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def bytes(self, size: int) -> bytes:
        return bytes(self._read(size))

    def cstring(self) -> str:
        """Read a null-terminated UTF-8 string."""
        start = self._pos
        raw = bytes(self._data[start : self._end])
        null = raw.find(b"\x00")
        if null < 0:
            raise TruncatedDataError(
                f"No null terminator found starting at offset {self.absolute_position}",
                offset=self.absolute_position,
            )
        try:
            result = raw[:null].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidStringError(
                f"Invalid UTF-8 in string starting at offset {self.absolute_position}",
                offset=self.absolute_position,
            ) from exc
        self._pos = start + null + 1  # skip past the null byte
        return result

    def skip(self, size: int) -> None:
        self._check("Skip", size)
        self._pos += size

    def slice(self, size: int) -> "BinaryReader":
        """Return a new BinaryReader bounded to the next `size` bytes.

        Advances this reader's cursor past the sliced region.
        """
        self._check("Slice", size)
        sub = BinaryReader(self._data, self._pos, self._pos + size, base=self._base)
        self._pos += size
        return sub


def subrecord_reader(subrecord) -> BinaryReader:
    """Reader over a subrecord's data, reporting offsets in the enclosing buffer."""
    return BinaryReader(subrecord.data, base=subrecord.offset)
