from pathlib import Path

import numpy as np
from scipy.io import wavfile

from pcmwave.format.reader import ParsedWave
from pcmwave.types import Pcm16Buffer


def decode_range(wave: ParsedWave, start: int = 0, count: int | None = None) -> Pcm16Buffer:
    """
    Decode a run of raw samples into a new array.

    Args:
        wave: Parsed source
        start: First raw sample index (default 0)
        count: Maximum number of samples, or None for everything after start

    Returns:
        Interleaved int16 samples, trimmed to whole frames
    """
    available = max(wave.total_raw_sample_count - start, 0)
    count = available if count is None else min(count, available)

    out = np.zeros(count, dtype=np.int16)
    written = wave.decode(out, start, count)
    written -= written % wave.channel_count
    return out[:written]


def save_pcm16_wav(
    path: Path | str,
    wave: ParsedWave,
    start: int = 0,
    count: int | None = None,
) -> int:
    """
    Write decoded samples as a canonical 16-bit PCM .wav file.

    Args:
        path: Destination file
        wave: Parsed source
        start: First raw sample index (default 0)
        count: Maximum number of samples, or None for everything after start

    Returns:
        Number of raw samples written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    samples = decode_range(wave, start, count)
    if wave.channel_count > 1:
        samples = samples.reshape(-1, wave.channel_count)

    wavfile.write(str(path), wave.sample_rate, samples)
    return int(samples.size)


def save_pcm16_raw(
    path: Path | str,
    wave: ParsedWave,
    start: int = 0,
    count: int | None = None,
) -> int:
    """
    Write decoded samples as headerless little-endian 16-bit PCM.

    Returns:
        Number of raw samples written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    samples = decode_range(wave, start, count)
    path.write_bytes(samples.astype("<i2").tobytes())
    return int(samples.size)
