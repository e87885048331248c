"""RIFF/WAVE chunk scanning.

This module walks the chunk table of a RIFF/WAVE buffer held in memory and
locates the fmt and data chunks. It also provides a small builder used to
assemble WAVE buffers from raw sample bytes.
"""

import logging
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pcmwave.errors import (
    ChunkLayoutError,
    DuplicateChunkError,
    MissingChunkError,
    RiffHeaderError,
    UnsupportedChunkError,
)
from pcmwave.types import CompressionKind, RawBuffer

logger = logging.getLogger(__name__)

# FourCC identifiers
RIFF_ID = b"RIFF"
WAVE_ID = b"WAVE"
FMT_ID = b"fmt "
DATA_ID = b"data"
WAVL_ID = b"wavl"
SLNT_ID = b"slnt"

UNSUPPORTED_CHUNK_IDS = frozenset({WAVL_ID, SLNT_ID})

RIFF_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8


@dataclass(frozen=True)
class ChunkSpan:
    """Location of one chunk inside the buffer."""

    chunk_id: bytes
    """The FourCC identifier."""

    offset: int
    """Offset of the chunk header from the start of the buffer."""

    size: int
    """Declared payload size, without the pad byte."""

    @property
    def payload_offset(self) -> int:
        return self.offset + CHUNK_HEADER_SIZE

    @property
    def padded_size(self) -> int:
        """Bytes the chunk occupies, header and pad byte included."""
        return CHUNK_HEADER_SIZE + self.size + (self.size % 2)

    @property
    def end(self) -> int:
        return self.offset + self.padded_size

    @property
    def name(self) -> str:
        return self.chunk_id.decode("latin-1")

    def payload(self, buffer: RawBuffer) -> memoryview:
        """Return a zero-copy view of the chunk payload."""
        return memoryview(buffer)[self.payload_offset : self.payload_offset + self.size]


@dataclass(frozen=True)
class ChunkTable:
    """Result of scanning a RIFF/WAVE buffer."""

    fmt: ChunkSpan
    data: ChunkSpan
    chunks: tuple[ChunkSpan, ...]
    """Every chunk in file order, ignored ones included."""

    warnings: tuple[str, ...] = ()

    @property
    def ignored(self) -> tuple[ChunkSpan, ...]:
        return tuple(c for c in self.chunks if c.chunk_id not in (FMT_ID, DATA_ID))


def read_riff_header(buffer: RawBuffer) -> int:
    """Validate the 12-byte RIFF/WAVE header.

    Args:
        buffer: The complete file contents.

    Returns:
        The RIFF size field.

    Raises:
        RiffHeaderError: If the magic values or the size field are wrong.
    """
    if len(buffer) < RIFF_HEADER_SIZE:
        raise RiffHeaderError("Buffer too small to be a valid WAV file", field="riff_size")

    if bytes(buffer[0:4]) != RIFF_ID:
        raise RiffHeaderError("Not a RIFF file", field="riff_id")

    riff_size = struct.unpack_from("<I", buffer, 4)[0]
    if riff_size != len(buffer) - 8:
        raise RiffHeaderError(
            f"RIFF size {riff_size} does not match buffer length {len(buffer)} - 8",
            field="riff_size",
        )

    if bytes(buffer[8:12]) != WAVE_ID:
        raise RiffHeaderError("Not a WAVE file", field="wave_id")

    return riff_size


def read_chunk_header(buffer: RawBuffer, offset: int) -> tuple[bytes, int]:
    """Read a chunk header (FourCC + size) at ``offset``.

    Raises:
        ChunkLayoutError: If fewer than 8 bytes remain.
    """
    if len(buffer) - offset < CHUNK_HEADER_SIZE:
        raise ChunkLayoutError(
            f"Truncated chunk header at offset {offset}", field="chunk_header"
        )

    chunk_id = bytes(buffer[offset : offset + 4])
    chunk_size = struct.unpack_from("<I", buffer, offset + 4)[0]
    return chunk_id, chunk_size


def iter_chunks(buffer: RawBuffer) -> Iterator[ChunkSpan]:
    """Yield every chunk after the RIFF header.

    The walk stops exactly at the end of the buffer. Chunks whose declared
    size exceeds the remaining bytes, or whose padded span runs past the end,
    raise ``ChunkLayoutError``.
    """
    offset = RIFF_HEADER_SIZE
    end = len(buffer)

    while offset < end:
        chunk_id, chunk_size = read_chunk_header(buffer, offset)

        if chunk_id in UNSUPPORTED_CHUNK_IDS:
            raise UnsupportedChunkError(
                f"Unsupported wav chunk <{chunk_id.decode('latin-1')}>", field="chunk_id"
            )

        if chunk_size > end - offset:
            raise ChunkLayoutError(
                f"Chunk <{chunk_id.decode('latin-1')}> at offset {offset} declares "
                f"{chunk_size} bytes, only {end - offset} remain",
                field="chunk_size",
            )

        span = ChunkSpan(chunk_id=chunk_id, offset=offset, size=chunk_size)
        if span.end > end:
            raise ChunkLayoutError(
                f"Chunk <{span.name}> at offset {offset} overruns the buffer by "
                f"{span.end - end} bytes",
                field="chunk_size",
            )

        yield span
        offset = span.end


def scan_chunks(buffer: RawBuffer) -> ChunkTable:
    """Locate the fmt and data chunks of a RIFF/WAVE buffer.

    Args:
        buffer: The complete file contents.

    Returns:
        ChunkTable with the fmt and data spans and every chunk seen.

    Raises:
        RiffHeaderError: If the outer header is invalid.
        ChunkLayoutError: If the chunk table does not tile the buffer.
        DuplicateChunkError: If fmt or data appears twice.
        MissingChunkError: If fmt or data is absent.
        UnsupportedChunkError: If a wavl or slnt chunk is present.
    """
    read_riff_header(buffer)

    fmt_span: ChunkSpan | None = None
    data_span: ChunkSpan | None = None
    chunks: list[ChunkSpan] = []
    warnings: list[str] = []

    for span in iter_chunks(buffer):
        chunks.append(span)

        if span.chunk_id == DATA_ID:
            if data_span is not None:
                raise DuplicateChunkError("Duplicate data chunk", field="data")
            data_span = span
        elif span.chunk_id == FMT_ID:
            if fmt_span is not None:
                raise DuplicateChunkError("Duplicate fmt chunk", field="fmt")
            fmt_span = span
        else:
            message = f"Ignoring wav chunk <{span.name}>, size: {span.size}"
            logger.warning(message)
            warnings.append(message)

    if fmt_span is None:
        raise MissingChunkError("fmt chunk not found in WAV buffer", field="fmt")
    if data_span is None:
        raise MissingChunkError("data chunk not found in WAV buffer", field="data")

    return ChunkTable(
        fmt=fmt_span,
        data=data_span,
        chunks=tuple(chunks),
        warnings=tuple(warnings),
    )


def chunk_bytes(chunk_id: bytes, payload: bytes) -> bytes:
    """Encode one chunk, padding odd-sized payloads to even length."""
    if len(chunk_id) != 4:
        raise ValueError(f"Chunk id must be 4 bytes, got {chunk_id!r}")

    chunk = chunk_id + struct.pack("<I", len(payload)) + payload
    if len(payload) % 2:
        chunk += b"\x00"
    return chunk


def build_wav(
    samples: bytes,
    sample_rate: int,
    num_channels: int = 1,
    bits_per_sample: int = 16,
    compression: CompressionKind | None = None,
    extra_chunks: Iterable[tuple[bytes, bytes]] = (),
) -> bytes:
    """Build a complete WAV buffer around raw sample bytes.

    Args:
        samples: Raw audio sample data (already in the correct byte format).
        sample_rate: The sample rate in Hz.
        num_channels: Number of audio channels (default: 1 for mono).
        bits_per_sample: Bits per sample (default: 16).
        compression: Compression code. Defaults to raw PCM.
        extra_chunks: ``(chunk_id, payload)`` pairs appended after the data chunk.

    Returns:
        The complete WAV file as bytes.
    """
    if compression is None:
        compression = CompressionKind.RAW_PCM

    bytes_per_sample = bits_per_sample // 8
    byte_rate = sample_rate * num_channels * bytes_per_sample
    block_align = num_channels * bytes_per_sample

    fmt_chunk = struct.pack(
        "<HHIIHH",
        int(compression),
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    )

    body = bytearray(WAVE_ID)
    body.extend(chunk_bytes(FMT_ID, fmt_chunk))
    body.extend(chunk_bytes(DATA_ID, samples))
    for chunk_id, payload in extra_chunks:
        body.extend(chunk_bytes(chunk_id, payload))

    # RIFF size = file size - 8 (RIFF id + size field)
    return RIFF_ID + struct.pack("<I", len(body)) + bytes(body)
