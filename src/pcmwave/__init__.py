"""pcmwave - RIFF/WAVE parsing and 16-bit PCM decoding.

This package reads uncompressed WAV data held in memory and converts its
samples (8-bit unsigned, 16/24/32-bit signed or 32-bit float) to interleaved
16-bit signed PCM.

Example Usage
-------------
>>> from pcmwave import read_wave_file
>>> import numpy as np
>>>
>>> wave = read_wave_file("speech.wav")
>>> print(wave.channel_count, wave.sample_rate, wave.pcm_count)
>>>
>>> # Decode the first second
>>> out = np.zeros(wave.sample_rate * wave.channel_count, dtype=np.int16)
>>> written = wave.decode(out, 0, len(out))
"""

import logging

from pcmwave.errors import (
    ChunkLayoutError,
    DuplicateChunkError,
    FormatError,
    MissingChunkError,
    RiffError,
    RiffHeaderError,
    UnsupportedChunkError,
    UnsupportedFormatError,
    WaveError,
    WaveFileError,
)
from pcmwave.format import (
    ChunkSpan,
    ChunkTable,
    DataView,
    ParsedWave,
    WaveFormat,
    build_wav,
    load_wave_bytes,
    read_wave_file,
    scan_chunks,
)
from pcmwave.types import CompressionKind, SampleFormat

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Types
    "CompressionKind",
    "SampleFormat",
    "ChunkSpan",
    "ChunkTable",
    "DataView",
    "WaveFormat",
    # Reader
    "ParsedWave",
    "load_wave_bytes",
    "read_wave_file",
    "scan_chunks",
    "build_wav",
    # Errors
    "WaveError",
    "RiffError",
    "RiffHeaderError",
    "ChunkLayoutError",
    "DuplicateChunkError",
    "MissingChunkError",
    "UnsupportedChunkError",
    "FormatError",
    "UnsupportedFormatError",
    "WaveFileError",
]
