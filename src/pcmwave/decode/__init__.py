"""Sample decoding to 16-bit signed PCM."""

from pcmwave.decode.samples import CONVERTERS, convert_samples, decode_samples

__all__ = [
    "CONVERTERS",
    "convert_samples",
    "decode_samples",
]
