"""Exceptions raised while decoding a plugin file.

Every structural failure is a PluginDecodeError. The base class derives from
ValueError so callers that already catch ValueError around the readers keep
working.
"""


class PluginDecodeError(ValueError):
    """Base class for every structural decode failure.

    Carries the byte offset where decoding stopped and, when known, the
    record or group code being decoded.
    """

    def __init__(self, message: str, *, offset: int | None = None, code=None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.code = code

    def __str__(self) -> str:
        text = self.message
        if self.code is not None:
            text = f"{self.code}: {text}"
        if self.offset is not None:
            text = f"{text} (offset {self.offset:#x})"
        return text

    def with_context(self, *, code=None, offset: int | None = None) -> "PluginDecodeError":
        """Return a copy of this error with any missing code/offset filled in."""
        return type(self)(
            self.message,
            offset=self.offset if self.offset is not None else offset,
            code=self.code if self.code is not None else code,
        )

    def at_offset(self, offset: int) -> "PluginDecodeError":
        """Return a copy of this error reporting *offset* instead of its own."""
        return type(self)(self.message, offset=offset, code=self.code)


class TruncatedDataError(PluginDecodeError):
    """A read ran past the end of its bounded region."""


class InvalidFlagsError(PluginDecodeError):
    """A flags word carries bits the active vocabulary does not name."""


class UnknownGroupKindError(PluginDecodeError):
    """A group header carries a kind code outside the known set."""


class DecompressionError(PluginDecodeError):
    """A compressed payload could not be inflated to its declared size."""


class InvalidStringError(PluginDecodeError):
    """A mandatory string is not valid UTF-8."""


class CorruptRecordError(PluginDecodeError):
    """A record is structurally wrong (unexpected code, malformed subrecord)."""


class CorruptGroupError(PluginDecodeError):
    """A group is structurally wrong (bad tag, impossible size, misplaced kind)."""


class TrailingDataError(PluginDecodeError):
    """Bytes remain after the last top-level group."""


class PluginReadError(OSError):
    """The plugin source could not be read into memory."""
