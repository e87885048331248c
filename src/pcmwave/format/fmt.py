"""fmt chunk parsing and validation."""

import struct
from dataclasses import dataclass

from pcmwave.errors import FormatError, UnsupportedFormatError
from pcmwave.types import CompressionKind, RawBuffer, SampleFormat

FMT_STRUCT = struct.Struct("<HHIIHH")
MIN_FMT_SIZE = FMT_STRUCT.size

SUPPORTED_CHANNEL_COUNTS = (1, 2)
MAX_BYTES_PER_SAMPLE = 4


@dataclass(frozen=True)
class WaveFormat:
    """Typed contents of a validated fmt chunk."""

    compression: CompressionKind
    channel_count: int
    sample_rate: int
    byte_rate: int
    """Average bytes per second. Stored as read, never validated."""

    block_align: int
    bits_per_sample: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def sample_format(self) -> SampleFormat:
        return SampleFormat.from_descriptor(self.compression, self.bytes_per_sample)


def parse_fmt_chunk(payload: RawBuffer) -> WaveFormat:
    """Parse and validate the payload of a fmt chunk.

    Only the first 16 bytes are read; any extension bytes are ignored.

    Args:
        payload: The fmt chunk payload.

    Returns:
        The validated WaveFormat.

    Raises:
        FormatError: If the payload is too short or block align is inconsistent.
        UnsupportedFormatError: If compression, channel count or bit depth
            is not supported.
    """
    if len(payload) < MIN_FMT_SIZE:
        raise FormatError(
            f"fmt chunk too small: {len(payload)} bytes, need {MIN_FMT_SIZE}",
            field="fmt_size",
        )

    (
        compression_code,
        channel_count,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    ) = FMT_STRUCT.unpack_from(payload, 0)

    try:
        compression = CompressionKind(compression_code)
    except ValueError as e:
        raise UnsupportedFormatError(
            f"Unsupported compression code {compression_code}, only uncompressed wav is supported",
            field="compression",
        ) from e

    if channel_count not in SUPPORTED_CHANNEL_COUNTS:
        raise UnsupportedFormatError(
            f"Unsupported channel count {channel_count}, expected 1 or 2",
            field="channel_count",
        )

    if bits_per_sample == 0 or bits_per_sample % 8 != 0:
        raise UnsupportedFormatError(
            f"bits_per_sample must be a positive multiple of 8, got {bits_per_sample}",
            field="bits_per_sample",
        )

    bytes_per_sample = bits_per_sample // 8
    if bytes_per_sample > MAX_BYTES_PER_SAMPLE:
        raise UnsupportedFormatError(
            f"Unsupported bit depth {bits_per_sample}, at most 32 bits per sample",
            field="bits_per_sample",
        )

    if compression is CompressionKind.FLOAT_PCM and bytes_per_sample != 4:
        raise UnsupportedFormatError(
            f"IEEE float samples must be 32 bits, got {bits_per_sample}",
            field="bits_per_sample",
        )

    if bytes_per_sample * channel_count != block_align:
        raise FormatError(
            f"block_align {block_align} does not match "
            f"{bytes_per_sample} bytes x {channel_count} channels",
            field="block_align",
        )

    return WaveFormat(
        compression=compression,
        channel_count=channel_count,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
    )
