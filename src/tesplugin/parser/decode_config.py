"""Configuration knobs for the plugin decoder.

Defaults match Skyrim-generation plugins. Other engine generations may swap
in their own flag vocabularies.
"""

from dataclasses import dataclass

from tesplugin.models.flags import PLUGIN_FLAGS, RECORD_FLAGS, FlagVocabulary
from tesplugin.models.identifiers import TypeCode


# Top-level categories whose records nest child groups (world, cell and
# dialogue trees). Their group bodies are kept as opaque bytes.
NESTED_CATEGORIES: frozenset[TypeCode] = frozenset(
    TypeCode.from_str(code) for code in ("WRLD", "CELL", "DIAL")
)


@dataclass(frozen=True, slots=True)
class DecodeConfig:
    """Decoder parameters that aren't stored in the plugin itself."""

    record_flags: FlagVocabulary = RECORD_FLAGS
    plugin_flags: FlagVocabulary = PLUGIN_FLAGS
    nested_categories: frozenset[TypeCode] = NESTED_CATEGORIES


DEFAULT_CONFIG = DecodeConfig()
