"""Parse the TES4 file header record payload.

The TES4 record is always the first record in a plugin. Its subrecords:
  - HEDR: float32 version, int32 record count, uint32 next object id
  - CNAM: author (null-terminated string)
  - SNAM: description (null-terminated string)
  - MAST: master filename, each followed by a DATA (uint64)
  - ONAM: overridden FormIds (uint32 each)
  - INTV, INCC: uint32 counters

Unknown subrecords are ignored.
"""

import logging

from tesplugin.errors import CorruptRecordError
from tesplugin.models.identifiers import FormId
from tesplugin.models.records import FileHeaderData, Hedr, MasterFile, Subrecord
from tesplugin.parser.binary_reader import subrecord_reader


logger = logging.getLogger(__name__)


def _parse_hedr(sub: Subrecord) -> Hedr:
    reader = subrecord_reader(sub)
    return Hedr(
        version=reader.float32(),
        num_records=reader.int32(),
        next_object_id=reader.form_id(),
    )


def _parse_zstring(sub: Subrecord) -> str:
    return subrecord_reader(sub).cstring()


def _parse_form_ids(sub: Subrecord) -> list[FormId]:
    size = len(sub.data)
    if size % 4:
        raise CorruptRecordError(
            f"ONAM size {size} is not a multiple of 4", offset=sub.offset
        )
    reader = subrecord_reader(sub)
    return [reader.form_id() for _ in range(size // 4)]


def parse_file_header(subrecords: list[Subrecord]) -> FileHeaderData:
    """Build FileHeaderData from the TES4 record's subrecords, in file order."""
    hedr = Hedr()
    author: str | None = None
    description: str | None = None
    masters: list[MasterFile] = []
    overrides: list[FormId] = []
    intv = 0
    incc = 0
    # DATA only means something right after a MAST.
    pending_master: str | None = None

    for sub in subrecords:
        code = str(sub.type)
        if code != "DATA" and pending_master is not None:
            logger.warning("TES4 MAST %r has no DATA subrecord", pending_master)
            masters.append(MasterFile(name=pending_master))
            pending_master = None

        if code == "HEDR":
            hedr = _parse_hedr(sub)
        elif code == "CNAM":
            author = _parse_zstring(sub)
        elif code == "SNAM":
            description = _parse_zstring(sub)
        elif code == "MAST":
            pending_master = _parse_zstring(sub)
        elif code == "DATA":
            if pending_master is None:
                logger.warning("TES4 DATA subrecord without a preceding MAST; ignored")
                continue
            masters.append(MasterFile(name=pending_master, tag=subrecord_reader(sub).uint64()))
            pending_master = None
        elif code == "ONAM":
            overrides.extend(_parse_form_ids(sub))
        elif code == "INTV":
            intv = subrecord_reader(sub).uint32()
        elif code == "INCC":
            incc = subrecord_reader(sub).uint32()

    if pending_master is not None:
        logger.warning("TES4 MAST %r has no DATA subrecord", pending_master)
        masters.append(MasterFile(name=pending_master))

    return FileHeaderData(
        hedr=hedr,
        author=author,
        description=description,
        masters=tuple(masters),
        overrides=tuple(overrides),
        intv=intv,
        incc=incc,
    )
