"""Record-level data classes: headers, subrecords and the payload kinds.

Raw byte fields (subrecord data, opaque payloads) are memoryviews into the
decoded buffer; call bytes() on one to detach it.
"""

from dataclasses import dataclass, field
from enum import IntFlag

from tesplugin.models.identifiers import FormId, TypeCode


@dataclass(frozen=True, slots=True)
class Subrecord:
    """A single subrecord within a record (e.g. EDID, HEDR, MAST)."""
    type: TypeCode
    data: bytes | memoryview   # raw payload (size is len(data))
    # Position of data[0] in the buffer the subrecord was scanned from.
    offset: int = field(default=0, compare=False)


@dataclass(frozen=True, slots=True)
class RecordHeader:
    """24-byte record header preceding the record data."""
    type: TypeCode   # e.g. TES4, KYWD, NPC_
    data_size: int   # size of the record data (after header), as stored
    flags: IntFlag   # PluginFlags for TES4, RecordFlags otherwise
    form_id: FormId
    timestamp: int
    vc_info: int
    version: int
    unknown: int

    def has_flag(self, name: str) -> bool:
        """True if the flag type names *name* and that bit is set."""
        member = type(self.flags).__members__.get(name)
        return member is not None and bool(self.flags & member)

    @property
    def is_compressed(self) -> bool:
        return self.has_flag("COMPRESSED")


@dataclass(frozen=True, slots=True)
class Hedr:
    """HEDR subrecord of the file header."""
    version: float = 0.0
    num_records: int = 0
    next_object_id: FormId = FormId(0)


@dataclass(frozen=True, slots=True)
class MasterFile:
    """One MAST entry; tag is the 64-bit value from the DATA that follows it."""
    name: str
    tag: int = 0


@dataclass(frozen=True, slots=True)
class FileHeaderData:
    """Decoded payload of the TES4 file header record."""
    hedr: Hedr = field(default_factory=Hedr)
    author: str | None = None
    description: str | None = None
    masters: tuple[MasterFile, ...] = ()
    overrides: tuple[FormId, ...] = ()
    intv: int = 0
    incc: int = 0


@dataclass(frozen=True, slots=True)
class Color:
    r: int
    g: int
    b: int
    a: int


@dataclass(frozen=True, slots=True)
class GameSettingPayload:
    """GMST: an editor id plus a DATA value typed by the editor id's first letter.

    value is None when there is no DATA or the prefix is not one of b/i/f/s.
    String settings in localized plugins hold a string-table id (int).
    """
    editor_id: str | None = None
    value: int | float | str | None = None
    subrecords: tuple[Subrecord, ...] = ()


@dataclass(frozen=True, slots=True)
class KeywordPayload:
    """KYWD: an editor id and an optional CNAM color."""
    editor_id: str | None = None
    color: Color | None = None
    subrecords: tuple[Subrecord, ...] = ()


@dataclass(frozen=True, slots=True)
class OpaquePayload:
    """Payload of a record type without a dedicated decoder.

    data holds the payload bytes (inflated if the record was compressed),
    kept unmodified for later reinterpretation.
    """
    data: bytes | memoryview
    editor_id: str | None = None
    subrecords: tuple[Subrecord, ...] = ()


Payload = FileHeaderData | GameSettingPayload | KeywordPayload | OpaquePayload


@dataclass(frozen=True, slots=True)
class Record:
    """A decoded record: header + payload."""
    header: RecordHeader
    payload: Payload

    @property
    def form_id(self) -> FormId:
        return self.header.form_id

    @property
    def editor_id(self) -> str | None:
        if isinstance(self.payload, FileHeaderData):
            return None
        return self.payload.editor_id

    @property
    def subrecords(self) -> tuple[Subrecord, ...]:
        if isinstance(self.payload, FileHeaderData):
            return ()
        return self.payload.subrecords

    def get_subrecord(self, sub_type: "TypeCode | str") -> Subrecord | None:
        """Get first subrecord of given type."""
        wanted = TypeCode.coerce(sub_type)
        for sub in self.subrecords:
            if sub.type == wanted:
                return sub
        return None

    def get_subrecords(self, sub_type: "TypeCode | str") -> list[Subrecord]:
        """Get all subrecords of given type."""
        wanted = TypeCode.coerce(sub_type)
        return [sub for sub in self.subrecords if sub.type == wanted]
