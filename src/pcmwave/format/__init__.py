"""RIFF/WAVE container parsing.

The pipeline runs in one direction: the buffer is scanned for its chunk
table, the fmt chunk is parsed into a WaveFormat, and the data chunk is
exposed as a borrowed view for the sample decoder.

    +----------------------------------------+
    | RIFF header ("WAVE")                   |
    +----------------------------------------+
    | fmt  chunk  -> WaveFormat              |
    +----------------------------------------+
    | other chunks (skipped with a warning)  |
    +----------------------------------------+
    | data chunk  -> DataView                |
    +----------------------------------------+

Example Usage
-------------
>>> from pcmwave.format import read_wave_file
>>> wave = read_wave_file("speech.wav")
>>> samples = wave.decode_all()
"""

from pcmwave.format.fmt import WaveFormat, parse_fmt_chunk
from pcmwave.format.reader import (
    DataView,
    ParsedWave,
    load_wave_bytes,
    read_wave_file,
)
from pcmwave.format.riff import ChunkSpan, ChunkTable, build_wav, scan_chunks

__all__ = [
    # Container
    "ChunkSpan",
    "ChunkTable",
    "scan_chunks",
    "build_wav",
    # Format
    "WaveFormat",
    "parse_fmt_chunk",
    # Reader
    "DataView",
    "ParsedWave",
    "load_wave_bytes",
    "read_wave_file",
]
