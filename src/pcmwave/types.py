from enum import Enum, IntEnum
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

from pcmwave.errors import InternalInvariantError

Pcm16Buffer: TypeAlias = NDArray[np.int16]
RawBuffer: TypeAlias = bytes | bytearray | memoryview


class CompressionKind(IntEnum):
    """Compression codes accepted in the fmt chunk."""

    RAW_PCM = 1
    FLOAT_PCM = 3

    @property
    def display_name(self) -> str:
        return "PCM" if self is CompressionKind.RAW_PCM else "IEEE float"


class SampleFormat(str, Enum):
    """One variant per supported (compression, sample width) pair."""

    PCM_U8 = "pcm_u8"
    PCM_S16 = "pcm_s16"
    PCM_S24 = "pcm_s24"
    PCM_S32 = "pcm_s32"
    FLOAT32 = "float32"

    @property
    def bytes_per_sample(self) -> int:
        return _WIDTHS[self]

    @property
    def compression(self) -> CompressionKind:
        if self is SampleFormat.FLOAT32:
            return CompressionKind.FLOAT_PCM
        return CompressionKind.RAW_PCM

    @classmethod
    def from_descriptor(cls, compression: CompressionKind, bytes_per_sample: int) -> "SampleFormat":
        """Resolve a compression kind and sample width to a variant.

        Raises:
            InternalInvariantError: If the pair has no variant. The fmt chunk
                parser rejects such pairs, so reaching this is a bug.
        """
        for variant in cls:
            if variant.compression is compression and variant.bytes_per_sample == bytes_per_sample:
                return variant
        raise InternalInvariantError(
            f"No sample format for {compression.name} with {bytes_per_sample} bytes per sample"
        )


_WIDTHS = {
    SampleFormat.PCM_U8: 1,
    SampleFormat.PCM_S16: 2,
    SampleFormat.PCM_S24: 3,
    SampleFormat.PCM_S32: 4,
    SampleFormat.FLOAT32: 4,
}
