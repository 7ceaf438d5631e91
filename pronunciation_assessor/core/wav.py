"""RIFF/WAVE container parsing, PCM validation, and sample extraction.

WHY: Clients send a complete WAV file, but the recognizer wants the raw
sample bytes plus the format they are in. Real-world WAV files often
carry extra chunks (LIST, bext, JUNK, fact) before or after the audio,
so assuming a 44-byte header silently feeds metadata to the recognizer.
We walk the chunk list and slice out exactly the ``data`` payload.

HOW: parse_wav() runs one cursor loop over the immutable buffer. Every
multi-byte read is preceded by a bounds check. The ``fmt `` chunk
supplies codec, channel count, sample rate and bit depth; the ``data``
chunk supplies the payload window. validate_pcm_format() enforces the
recognizer's input contract, and extract_pcm() returns a read-only view
of the payload without copying.

RULES:
- Header: bytes 0-4 == b"RIFF", bytes 8-12 == b"WAVE"; bytes 4-8 ignored
- Chunks: 4-byte tag, 4-byte little-endian length, payload, pad byte if
  the length is odd
- A chunk whose payload runs past the buffer end stops the scan; chunks
  already found stay valid
- A ``fmt `` chunk shorter than 16 bytes is fatal
- Chunk order is free; the last ``fmt ``/``data`` chunk seen wins
- Validation order: codec, then channels, then bit depth
"""

from __future__ import annotations

import struct
from dataclasses import asdict, dataclass

from pronunciation_assessor.core.errors import (
    InvalidContainer,
    MissingDataChunk,
    MissingFormatChunk,
    UnsupportedBitDepth,
    UnsupportedChannelLayout,
    UnsupportedCodec,
)

RIFF_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
MIN_FMT_CHUNK_SIZE = 16

WAVE_FORMAT_PCM = 1
REQUIRED_CHANNELS = 1
REQUIRED_BITS_PER_SAMPLE = 16

_CHUNK_HEADER = struct.Struct("<4sI")
# audioFormat, numChannels, sampleRate, (byteRate, blockAlign skipped), bitsPerSample
_FMT_FIELDS = struct.Struct("<HHI6xH")


@dataclass(frozen=True)
class ContainerHeader:
    """Format and payload metadata located inside a WAV container.

    RULES:
    - data_offset + data_size <= len(source buffer)
    - pcm_bytes is the same number as data_size
    """

    audio_format: int
    num_channels: int
    sample_rate: int
    bits_per_sample: int
    data_offset: int
    data_size: int

    @property
    def pcm_bytes(self) -> int:
        return self.data_size

    def to_dict(self) -> dict:
        """Plain dict including the ``pcm_bytes`` alias."""
        data = asdict(self)
        data["pcm_bytes"] = self.pcm_bytes
        return data


@dataclass(frozen=True)
class PcmAudio:
    """A validated container and the view of its sample payload."""

    header: ContainerHeader
    pcm: memoryview


def parse_wav(buf: bytes) -> ContainerHeader:
    """Parse a RIFF/WAVE buffer into a ContainerHeader.

    WHY: The recognizer needs the sample rate and the exact byte window of
    the audio samples, wherever the ``data`` chunk happens to sit.

    HOW: Check the 12-byte RIFF header, then walk chunks from offset 12
    with an explicit cursor. Each iteration needs 8 bytes for the chunk
    header and then the full declared payload; when the payload does not
    fit, scanning stops instead of failing.

    RULES:
    - Raises InvalidContainer for short buffers or wrong magic tags
    - Raises InvalidContainer for a ``fmt `` chunk under 16 bytes
    - Raises MissingFormatChunk / MissingDataChunk after the scan
    - Never reads outside ``buf``

    Args:
        buf: The complete container bytes.

    Returns:
        ContainerHeader describing the format and the payload window.
    """
    length = len(buf)
    if length < RIFF_HEADER_SIZE:
        raise InvalidContainer("Invalid WAV buffer.")

    if bytes(buf[0:4]) != b"RIFF" or bytes(buf[8:12]) != b"WAVE":
        raise InvalidContainer("Invalid WAV: expected RIFF/WAVE.")

    fmt: tuple[int, int, int, int] | None = None
    data: tuple[int, int] | None = None

    offset = RIFF_HEADER_SIZE
    while offset + CHUNK_HEADER_SIZE <= length:
        tag, size = _CHUNK_HEADER.unpack_from(buf, offset)
        payload_offset = offset + CHUNK_HEADER_SIZE

        if payload_offset + size > length:
            # Truncated trailing chunk.
            break

        if tag == b"fmt ":
            if size < MIN_FMT_CHUNK_SIZE:
                raise InvalidContainer("Invalid WAV fmt chunk.")
            fmt = _FMT_FIELDS.unpack_from(buf, payload_offset)
        elif tag == b"data":
            data = (payload_offset, size)

        offset = payload_offset + size + (size % 2)

    if fmt is None:
        raise MissingFormatChunk()
    if data is None:
        raise MissingDataChunk()

    audio_format, num_channels, sample_rate, bits_per_sample = fmt
    data_offset, data_size = data
    return ContainerHeader(
        audio_format=audio_format,
        num_channels=num_channels,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        data_offset=data_offset,
        data_size=data_size,
    )


def validate_pcm_format(header: ContainerHeader) -> None:
    """Reject anything that is not mono 16-bit linear PCM.

    Only the first violation is reported: codec, then channels, then bit
    depth.
    """
    if header.audio_format != WAVE_FORMAT_PCM:
        raise UnsupportedCodec(header.audio_format, WAVE_FORMAT_PCM)
    if header.num_channels != REQUIRED_CHANNELS:
        raise UnsupportedChannelLayout(header.num_channels, REQUIRED_CHANNELS)
    if header.bits_per_sample != REQUIRED_BITS_PER_SAMPLE:
        raise UnsupportedBitDepth(header.bits_per_sample, REQUIRED_BITS_PER_SAMPLE)


def extract_pcm(buf: bytes, header: ContainerHeader) -> memoryview:
    """Return a read-only view of ``buf[data_offset:data_offset + data_size]``."""
    end = header.data_offset + header.data_size
    if header.data_offset < 0 or end > len(buf):
        raise InvalidContainer("WAV data chunk extends past the end of the buffer.")
    return memoryview(buf).toreadonly()[header.data_offset:end]


def load_pcm_audio(buf: bytes) -> PcmAudio:
    """Parse, validate, and slice a WAV buffer in one step."""
    header = parse_wav(buf)
    validate_pcm_format(header)
    return PcmAudio(header=header, pcm=extract_pcm(buf, header))
