"""The decoded plugin: TES4 header record + top-level groups by category."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from tesplugin.models.flags import PluginFlags
from tesplugin.models.groups import Group
from tesplugin.models.identifiers import TypeCode
from tesplugin.models.records import FileHeaderData, MasterFile, Record


@dataclass(frozen=True, slots=True)
class Plugin:
    header: Record
    groups: Mapping[TypeCode, Group]

    @property
    def file_header(self) -> FileHeaderData:
        payload = self.header.payload
        if not isinstance(payload, FileHeaderData):
            raise TypeError("Plugin header record does not carry file header data")
        return payload

    @property
    def masters(self) -> tuple[MasterFile, ...]:
        return self.file_header.masters

    @property
    def is_master(self) -> bool:
        return bool(self.header.header.flags & PluginFlags.MASTER)

    @property
    def is_localized(self) -> bool:
        return bool(self.header.header.flags & PluginFlags.LOCALIZED)

    @property
    def is_light(self) -> bool:
        return bool(self.header.header.flags & PluginFlags.LIGHT)

    @property
    def categories(self) -> list[TypeCode]:
        return list(self.groups)

    def get(self, code: "TypeCode | str") -> Group | None:
        return self.groups.get(TypeCode.coerce(code))

    def __getitem__(self, code: "TypeCode | str") -> Group:
        return self.groups[TypeCode.coerce(code)]

    def __contains__(self, code: object) -> bool:
        try:
            return TypeCode.coerce(code) in self.groups  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    def iter_records(self) -> Iterator[Record]:
        """Yield every decoded record in file order (opaque groups are skipped)."""
        for group in self.groups.values():
            yield from group.records
