"""
PCM decoding for Gemini speech output.

Narration audio arrives as base64 signed 16-bit little-endian mono PCM at
24 kHz. Samples are normalized to floats as sample / 32768.
"""

import base64
import binascii
import io
import struct
import wave
from dataclasses import dataclass, field
from typing import List

from storyframe.core.constants import PCM_CHANNELS, PCM_SAMPLE_RATE, PCM_SAMPLE_WIDTH, PCM_SCALE
from storyframe.core.exceptions import AudioDecodeError


@dataclass
class AudioBuffer:
    """Decoded mono waveform."""
    samples: List[float] = field(default_factory=list)
    sample_rate: int = PCM_SAMPLE_RATE
    channels: int = PCM_CHANNELS

    @property
    def frame_count(self) -> int:
        return len(self.samples) // self.channels

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate if self.sample_rate else 0.0

    def to_float32_bytes(self) -> bytes:
        """Interleaved native float32 frames, ready for an output stream."""
        return struct.pack(f"={len(self.samples)}f", *self.samples)


def decode_base64(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioDecodeError(f"Audio payload is not valid base64: {e}") from e


def decode_pcm16(data: bytes) -> List[float]:
    """Convert little-endian int16 PCM bytes to normalized floats."""
    if len(data) % PCM_SAMPLE_WIDTH:
        raise AudioDecodeError(
            f"PCM payload has odd length ({len(data)} bytes); expected 16-bit samples"
        )
    count = len(data) // PCM_SAMPLE_WIDTH
    return [sample / PCM_SCALE for sample in struct.unpack(f"<{count}h", data)]


def decode_audio(payload: str, sample_rate: int = PCM_SAMPLE_RATE) -> AudioBuffer:
    """Decode a base64 PCM payload into an AudioBuffer."""
    return AudioBuffer(samples=decode_pcm16(decode_base64(payload)), sample_rate=sample_rate)


def pcm_to_wav(data: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> bytes:
    """Wrap raw mono 16-bit PCM in a WAV container."""
    if len(data) % PCM_SAMPLE_WIDTH:
        raise AudioDecodeError(f"PCM payload has odd length ({len(data)} bytes)")
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(PCM_CHANNELS)
        wav.setsampwidth(PCM_SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(data)
    return buffer.getvalue()
