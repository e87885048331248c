import json
import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from pcmwave.cli.validators import validate_non_negative_integer, validate_positive_integer
from pcmwave.errors import WaveError
from pcmwave.export import save_pcm16_raw, save_pcm16_wav
from pcmwave.format.reader import MAX_FILE_SIZE_BYTES, ParsedWave, read_wave_file
from pcmwave.format.riff import DATA_ID, FMT_ID

app = App(name="pcmwave", help="Inspect RIFF/WAVE files and decode them to 16-bit PCM")
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(message, style="bold yellow")


def load_or_report(path: Path, max_size: int) -> ParsedWave | None:
    """Parse a WAV file, printing the failure and returning None on error."""
    try:
        wave = read_wave_file(path, max_size=max_size)
    except WaveError as e:
        print_error(f"Error reading {path}: {e}")
        return None

    for warning in wave.warnings:
        print_warning(f"Warning: {warning}")
    return wave


def summarize(path: Path, wave: ParsedWave) -> dict[str, object]:
    """Build the summary reported by the info command."""
    return {
        "path": str(path),
        "file_size": path.stat().st_size,
        "channels": wave.channel_count,
        "sample_rate": wave.sample_rate,
        "pcm_count": wave.pcm_count,
        "frame_count": wave.frame_count,
        "duration_seconds": wave.duration_seconds,
        "sample_format": wave.sample_format.value,
        "bits_per_sample": wave.format.bits_per_sample,
        "compression": wave.compression_kind.display_name,
        "warnings": list(wave.warnings),
    }


@app.command
def info(
    path: Path,
    as_json: Annotated[bool, Parameter(name="--json")] = False,
    max_size: Annotated[int, Parameter(validator=validate_positive_integer)] = MAX_FILE_SIZE_BYTES,
) -> int:
    """
    Show the format of a WAV file.

    Parameters
    ----------
    path: Path
        The .wav file to inspect
    as_json: bool
        Print the summary as JSON instead of text
    max_size: int
        Largest file accepted, in bytes
    """
    wave = load_or_report(path, max_size)
    if wave is None:
        return 1

    summary = summarize(path, wave)
    if as_json:
        print(json.dumps(summary, indent=2))
        return 0

    console.print(f"File size: {summary['file_size']}")
    console.print(f"Channels: {wave.channel_count}")
    console.print(f"Sample rate: {wave.sample_rate}")
    console.print(f"Pcm count: {wave.pcm_count}")
    console.print(f"Frames: {wave.frame_count}")
    console.print(f"Duration: {wave.duration_seconds:.3f}s")
    console.print(
        f"Format: [cyan bold]{wave.compression_kind.display_name}[/], "
        f"{wave.format.bits_per_sample}-bit"
    )
    return 0


@app.command
def chunks(
    path: Path,
    max_size: Annotated[int, Parameter(validator=validate_positive_integer)] = MAX_FILE_SIZE_BYTES,
) -> int:
    """
    List every chunk of a WAV file.

    Parameters
    ----------
    path: Path
        The .wav file to inspect
    max_size: int
        Largest file accepted, in bytes
    """
    wave = load_or_report(path, max_size)
    if wave is None:
        return 1

    table = Table(title=str(path))
    table.add_column("Chunk", style="cyan")
    table.add_column("Offset", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status")

    for span in wave.chunks.chunks:
        status = "used" if span.chunk_id in (FMT_ID, DATA_ID) else "ignored"
        table.add_row(span.name, str(span.offset), str(span.size), status)

    console.print(table)
    return 0


@app.command
def decode(
    path: Path,
    output: Path = Path("decoded.wav"),
    start: Annotated[int, Parameter(validator=validate_non_negative_integer)] = 0,
    count: Annotated[int | None, Parameter(validator=validate_non_negative_integer)] = None,
    raw: bool = False,
    max_size: Annotated[int, Parameter(validator=validate_positive_integer)] = MAX_FILE_SIZE_BYTES,
) -> int:
    """
    Decode a WAV file to 16-bit signed PCM.

    Parameters
    ----------
    path: Path
        The .wav file to decode
    output: Path
        Destination file (default: decoded.wav)
    start: int
        Index of the first raw sample to decode (default: 0)
    count: int | None
        Maximum number of raw samples to decode (default: all)
    raw: bool
        Write headerless little-endian PCM instead of a .wav file
    max_size: int
        Largest file accepted, in bytes
    """
    wave = load_or_report(path, max_size)
    if wave is None:
        return 1

    if start > wave.total_raw_sample_count:
        print_error(f"Start {start} is past the last sample ({wave.total_raw_sample_count})")
        return 1

    console.print(
        f"Decoding {wave.pcm_count} samples "
        f"([cyan bold]{wave.sample_format.value}[/], {wave.channel_count} channel(s))..."
    )

    try:
        if raw:
            written = save_pcm16_raw(output, wave, start=start, count=count)
        else:
            written = save_pcm16_wav(output, wave, start=start, count=count)
    except OSError as e:
        print_error(f"Error writing output: {e}")
        return 1

    print_success(f"Decoded {written} samples -> {output}")
    return 0


def main() -> None:
    sys.exit(app())


if __name__ == "__main__":
    main()
