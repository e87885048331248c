"""Error types raised while parsing RIFF/WAVE buffers.

Every failure detected while building a reader is a ``WaveError``. The
``field`` attribute names the header field or check that failed so callers
can tell the cases apart without matching on messages.
"""


class WaveError(Exception):
    """Base class for all RIFF/WAVE parse failures."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class RiffError(WaveError):
    """Error in the RIFF container structure."""


class RiffHeaderError(RiffError):
    """Bad RIFF magic, bad WAVE magic or a RIFF size that does not match the buffer."""


class ChunkLayoutError(RiffError):
    """A chunk overruns the buffer or the chunk table does not tile it exactly."""


class DuplicateChunkError(RiffError):
    """A chunk that must be unique appears more than once."""


class MissingChunkError(RiffError):
    """A required chunk was never found."""


class UnsupportedChunkError(RiffError):
    """A chunk type that cannot be handled (wavl/slnt streaming extensions)."""


class FormatError(WaveError):
    """The fmt chunk is malformed or inconsistent with the data chunk."""


class UnsupportedFormatError(FormatError):
    """Compression code, channel count or bit depth is not supported."""


class WaveFileError(WaveError):
    """The file holding the buffer could not be read."""


class InternalInvariantError(AssertionError):
    """A state that earlier validation makes unreachable was reached."""
