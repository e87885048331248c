"""Conversion of raw WAVE sample bytes to 16-bit signed PCM.

Each SampleFormat variant has its own converter. The scaling constants
reproduce the reference decoder bit for bit and are intentionally not the
"textbook" ones:

- 8-bit unsigned: ``(u8 - 127) * 256``
- 24-bit signed: sign bit moved to bit 31, then ``* (1 / 255)``
- 32-bit signed: ``* (1 / 65535)``
- 32-bit float: ``* 32767`` in single precision

Float results are truncated toward zero and every result is stored the way an
integer cast into a 16-bit cell stores it: the low 16 bits, two's complement.
"""

from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray

from pcmwave.types import Pcm16Buffer, RawBuffer, SampleFormat

U8_BIAS = 127
U8_SCALE = 256

S24_SIGN_BIT = np.uint32(0x800000)
S24_FACTOR = 1.0 / float(0xFF)

S32_FACTOR = 1.0 / float(0xFFFF)

FLOAT_SCALE = np.float32(0x7FFF)

SampleConverter = Callable[[RawBuffer], Pcm16Buffer]


def wrap_to_int16(values: NDArray[np.integer]) -> Pcm16Buffer:
    """Keep the low 16 bits of each integer as a signed value."""
    return values.astype(np.int16)


def truncate_to_int16(values: NDArray[np.floating]) -> Pcm16Buffer:
    """Truncate toward zero, then keep the low 16 bits.

    Non-finite values become 0.
    """
    with np.errstate(invalid="ignore"):
        finite = np.where(np.isfinite(values), values, 0.0)
        # fmod is exact, so the remainder equals the low bits of huge integers too
        low = np.fmod(np.trunc(finite), 65536.0)
    return wrap_to_int16(low.astype(np.int32))


def convert_u8(raw: RawBuffer) -> Pcm16Buffer:
    """8-bit unsigned PCM. Byte 127 is silence; byte 255 wraps to -32768."""
    # (255 - 127) * 256 is 32768, one past int16, so it wraps. 32512 is byte 254.
    values = np.frombuffer(raw, dtype=np.uint8).astype(np.int32)
    return wrap_to_int16((values - U8_BIAS) * U8_SCALE)


def convert_s16(raw: RawBuffer) -> Pcm16Buffer:
    """16-bit signed little-endian PCM, passed through unchanged."""
    return np.frombuffer(raw, dtype="<i2").astype(np.int16)


def unpack_s24(raw: RawBuffer) -> NDArray[np.int32]:
    """Load packed 24-bit samples into 32-bit integers.

    The sign bit (bit 23) is cleared and re-applied at bit 31 instead of
    sign-extending, so ``0xFFFFFF`` becomes ``0x807FFFFF``.
    """
    triplets = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.uint32)
    accumulator = triplets[:, 0] | (triplets[:, 1] << 8) | (triplets[:, 2] << 16)

    signum = (accumulator & S24_SIGN_BIT) >> np.uint32(16)
    accumulator &= ~S24_SIGN_BIT
    return (accumulator | (signum << np.uint32(24))).view(np.int32)


def convert_s24(raw: RawBuffer) -> Pcm16Buffer:
    """24-bit signed little-endian PCM."""
    return truncate_to_int16(unpack_s24(raw).astype(np.float64) * S24_FACTOR)


def convert_s32(raw: RawBuffer) -> Pcm16Buffer:
    """32-bit signed little-endian PCM."""
    values = np.frombuffer(raw, dtype="<i4").astype(np.float64)
    return truncate_to_int16(values * S32_FACTOR)


def convert_float32(raw: RawBuffer) -> Pcm16Buffer:
    """32-bit IEEE float PCM, nominally in [-1.0, 1.0]."""
    values = np.frombuffer(raw, dtype="<f4").astype(np.float32)
    with np.errstate(over="ignore"):
        scaled = values * FLOAT_SCALE
    return truncate_to_int16(scaled)


CONVERTERS: dict[SampleFormat, SampleConverter] = {
    SampleFormat.PCM_U8: convert_u8,
    SampleFormat.PCM_S16: convert_s16,
    SampleFormat.PCM_S24: convert_s24,
    SampleFormat.PCM_S32: convert_s32,
    SampleFormat.FLOAT32: convert_float32,
}


def convert_samples(sample_format: SampleFormat, raw: RawBuffer) -> Pcm16Buffer:
    """Convert raw sample bytes to a new int16 array.

    Raises:
        ValueError: If ``raw`` is not a whole number of samples.
    """
    width = sample_format.bytes_per_sample
    if len(raw) % width != 0:
        raise ValueError(
            f"{len(raw)} bytes is not a whole number of {width}-byte samples"
        )
    if len(raw) == 0:
        return np.zeros(0, dtype=np.int16)
    return CONVERTERS[sample_format](raw)


def decode_samples(sample_format: SampleFormat, raw: RawBuffer, out: Pcm16Buffer) -> int:
    """Convert raw sample bytes into the start of ``out``.

    Args:
        sample_format: Encoding of ``raw``.
        raw: Raw sample bytes, a whole number of samples.
        out: Destination int16 array. Only ``out[:n]`` is written.

    Returns:
        The number of samples written.

    Raises:
        ValueError: If ``out`` is too small or ``raw`` is not a whole number
            of samples.
    """
    count = len(raw) // sample_format.bytes_per_sample
    if len(out) < count:
        raise ValueError(f"Output buffer holds {len(out)} samples, {count} required")

    out[:count] = convert_samples(sample_format, raw)
    return count
