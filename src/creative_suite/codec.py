"""
Binary helpers: base64 framing, file intake and raw PCM decoding.
"""

from __future__ import annotations

import base64
import binascii
import io
import wave
from dataclasses import dataclass

import numpy as np

from creative_suite.errors import MalformedInputError, UnsupportedTypeError

PCM_SAMPLE_WIDTH = 2
PCM_SCALE = 32768.0


@dataclass(frozen=True)
class SelectedFile:
    """A file picked by the user, read fully into memory."""

    filename: str
    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass
class AudioBuffer:
    """Decoded float samples ready for playback.

    ``channels`` has shape ``(number_of_channels, length)``.
    """

    sample_rate: int
    channels: np.ndarray

    @property
    def number_of_channels(self) -> int:
        return int(self.channels.shape[0])

    @property
    def length(self) -> int:
        return int(self.channels.shape[1])

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate if self.sample_rate else 0.0

    def get_channel_data(self, channel: int) -> np.ndarray:
        return self.channels[channel]

    def to_wav_bytes(self) -> bytes:
        """Package the buffer as a 16-bit PCM WAV file."""
        interleaved = self.channels.T.reshape(-1)
        clipped = np.clip(interleaved, -1.0, 1.0)
        pcm = np.round(clipped * 32767.0).astype("<i2")

        out = io.BytesIO()
        with wave.open(out, "wb") as wf:
            wf.setnchannels(self.number_of_channels)
            wf.setsampwidth(PCM_SAMPLE_WIDTH)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm.tobytes())
        return out.getvalue()


def strip_data_url(base64_str: str) -> str:
    return base64_str.split("base64,", 1)[1] if "base64," in base64_str else base64_str


def to_data_url(base64_str: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64_str}"


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def decode_base64(text: str | bytes) -> bytes:
    """
    Decode standard base64 text.

    Raises:
        MalformedInputError: on characters outside the alphabet or bad padding
    """
    if isinstance(text, str):
        text = "".join(text.split())
    else:
        text = b"".join(text.split())
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"Invalid base64 input: {e}") from e


def decode_pcm_to_audio_buffer(
    data: bytes, sample_rate: int = 24000, channel_count: int = 1
) -> AudioBuffer:
    """
    Interpret ``data`` as 16-bit little-endian interleaved PCM.

    A trailing odd byte or incomplete frame is dropped.
    """
    if channel_count < 1:
        raise ValueError("channel_count must be at least 1")

    usable = len(data) - (len(data) % PCM_SAMPLE_WIDTH)
    samples = np.frombuffer(data[:usable], dtype="<i2").astype(np.float32) / PCM_SCALE

    frame_count = len(samples) // channel_count
    frames = samples[: frame_count * channel_count].reshape(frame_count, channel_count)
    return AudioBuffer(sample_rate=sample_rate, channels=np.ascontiguousarray(frames.T))


def encode_file_to_base64(file: SelectedFile, *, require_image: bool = True) -> tuple[str, str]:
    """
    Encode a selected file for transport.

    Returns:
        (base64 data, mime type)

    Raises:
        UnsupportedTypeError: if an image is required and the file is not one
    """
    if require_image and not file.is_image:
        raise UnsupportedTypeError("Please upload a valid image file.")
    return encode_base64(file.data), file.mime_type
