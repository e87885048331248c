"""RIFF/WAVE reader.

This module builds an immutable ``ParsedWave`` from a buffer held in memory
and decodes arbitrary runs of its samples to 16-bit signed PCM.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from pcmwave.decode.samples import decode_samples
from pcmwave.errors import FormatError, WaveFileError
from pcmwave.format.fmt import WaveFormat, parse_fmt_chunk
from pcmwave.format.riff import ChunkTable, scan_chunks
from pcmwave.types import CompressionKind, Pcm16Buffer, RawBuffer, SampleFormat

logger = logging.getLogger(__name__)

# Maximum file size read by read_wave_file (RIFF sizes are 32-bit)
MAX_FILE_SIZE_BYTES = 0xFFFFFFFF + 8


@dataclass(frozen=True)
class DataView:
    """Borrowed, bounds-checked view of the data chunk payload."""

    offset: int
    """Offset of the payload from the start of the source buffer."""

    length: int
    """Payload length in bytes."""

    view: memoryview = field(repr=False, compare=False)

    @classmethod
    def over(cls, buffer: RawBuffer, offset: int, length: int) -> "DataView":
        if offset < 0 or length < 0 or offset + length > len(buffer):
            raise IndexError(
                f"View [{offset}, {offset + length}) outside buffer of {len(buffer)} bytes"
            )
        view = memoryview(buffer).toreadonly()[offset : offset + length]
        return cls(offset=offset, length=length, view=view)

    def raw(self, start: int, stop: int) -> memoryview:
        """Return bytes ``[start, stop)`` of the payload without copying."""
        if not 0 <= start <= stop <= self.length:
            raise IndexError(f"Range [{start}, {stop}) outside data view of {self.length} bytes")
        return self.view[start:stop]


@dataclass(frozen=True)
class ParsedWave:
    """A validated RIFF/WAVE buffer ready for decoding.

    Instances are only created through ``from_bytes`` (or ``read_wave_file``),
    which either return a fully validated reader or raise a ``WaveError``.
    The source buffer is borrowed and must not be mutated while the reader
    is in use.
    """

    format: WaveFormat
    chunks: ChunkTable
    data_view: DataView

    def __post_init__(self) -> None:
        data = self.chunks.data
        if (self.data_view.offset, self.data_view.length) != (data.payload_offset, data.size):
            raise ValueError(
                f"data_view [{self.data_view.offset}, +{self.data_view.length}) does not match "
                f"data chunk payload [{data.payload_offset}, +{data.size})"
            )
        if self.data_view.length % self.format.bytes_per_sample != 0:
            raise ValueError(
                f"data_view length {self.data_view.length} is not a multiple of "
                f"{self.format.bytes_per_sample} bytes per sample"
            )

    @classmethod
    def from_bytes(cls, buffer: RawBuffer) -> "ParsedWave":
        """Parse a complete RIFF/WAVE buffer.

        Args:
            buffer: The complete file contents.

        Returns:
            The validated reader.

        Raises:
            WaveError: If any structural or format check fails.
        """
        chunks = scan_chunks(buffer)
        wave_format = parse_fmt_chunk(chunks.fmt.payload(buffer))

        data_size = chunks.data.size
        if data_size % wave_format.bytes_per_sample != 0:
            raise FormatError(
                f"data chunk size {data_size} is not a multiple of "
                f"{wave_format.bytes_per_sample} bytes per sample",
                field="data_size",
            )

        data_view = DataView.over(buffer, chunks.data.payload_offset, data_size)
        logger.debug(
            "Parsed wave: %d channel(s), %d Hz, %s, %d bytes of data",
            wave_format.channel_count,
            wave_format.sample_rate,
            wave_format.sample_format.value,
            data_size,
        )
        return cls(format=wave_format, chunks=chunks, data_view=data_view)

    @property
    def compression_kind(self) -> CompressionKind:
        return self.format.compression

    @property
    def channel_count(self) -> int:
        return self.format.channel_count

    @property
    def sample_rate(self) -> int:
        return self.format.sample_rate

    @property
    def bytes_per_sample(self) -> int:
        return self.format.bytes_per_sample

    @property
    def sample_format(self) -> SampleFormat:
        return self.format.sample_format

    @property
    def total_raw_sample_count(self) -> int:
        """Number of scalar samples, all channels interleaved."""
        return self.data_view.length // self.bytes_per_sample

    @property
    def pcm_count(self) -> int:
        return self.total_raw_sample_count

    @property
    def frame_count(self) -> int:
        return self.total_raw_sample_count // self.channel_count

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frame_count / self.sample_rate

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.chunks.warnings

    def decode(self, out: Pcm16Buffer, raw_sample_start: int, requested_count: int) -> int:
        """Decode up to ``requested_count`` samples into ``out[0:]``.

        Args:
            out: Destination int16 array.
            raw_sample_start: Index of the first raw sample to decode.
            requested_count: Maximum number of samples to decode.

        Returns:
            ``min(requested_count, total_raw_sample_count - raw_sample_start)``.

        Raises:
            ValueError: If the start index is out of range, the count is
                negative or ``out`` cannot hold the result.
        """
        total = self.total_raw_sample_count
        if not 0 <= raw_sample_start <= total:
            raise ValueError(f"raw_sample_start {raw_sample_start} outside [0, {total}]")
        if requested_count < 0:
            raise ValueError(f"requested_count must be >= 0, got {requested_count}")

        count = min(requested_count, total - raw_sample_start)
        width = self.bytes_per_sample
        raw = self.data_view.raw(raw_sample_start * width, (raw_sample_start + count) * width)
        return decode_samples(self.sample_format, raw, out)

    def decode_all(self) -> Pcm16Buffer:
        """Decode every sample into a new interleaved int16 array."""
        out = np.zeros(self.total_raw_sample_count, dtype=np.int16)
        self.decode(out, 0, self.total_raw_sample_count)
        return out

    def iter_blocks(self, block_size: int) -> Iterator[Pcm16Buffer]:
        """Yield consecutive decoded blocks of at most ``block_size`` samples."""
        if block_size <= 0:
            raise ValueError(f"block_size must be > 0, got {block_size}")

        start = 0
        while start < self.total_raw_sample_count:
            out = np.empty(block_size, dtype=np.int16)
            count = self.decode(out, start, block_size)
            yield out[:count]
            start += count


def load_wave_bytes(buffer: RawBuffer) -> ParsedWave:
    """Parse a RIFF/WAVE buffer already held in memory."""
    return ParsedWave.from_bytes(buffer)


def read_wave_file(
    path: Path | str,
    *,
    max_size: int = MAX_FILE_SIZE_BYTES,
) -> ParsedWave:
    """Read a WAV file into memory and parse it.

    Args:
        path: Path to the WAV file.
        max_size: Largest file accepted, in bytes.

    Returns:
        The parsed reader. It keeps the file contents alive.

    Raises:
        WaveFileError: If the file is missing, unreadable or too large.
        WaveError: If the contents are not a supported WAV file.
    """
    path = Path(path)

    try:
        file_size = path.stat().st_size
    except FileNotFoundError as e:
        raise WaveFileError(f"File not found: {path}", field="path") from e
    except OSError as e:
        raise WaveFileError(f"Cannot open file: {path}", field="path") from e

    if file_size > max_size:
        raise WaveFileError(
            f"File size ({file_size} bytes) exceeds maximum ({max_size} bytes)",
            field="file_size",
        )

    try:
        buffer = path.read_bytes()
    except OSError as e:
        raise WaveFileError(f"Cannot read file: {path}", field="path") from e

    logger.debug("Read %d bytes from %s", len(buffer), path)
    return ParsedWave.from_bytes(buffer)
