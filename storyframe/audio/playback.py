"""
Audio Playback

AudioPlayer owns one shared playback context and at most one active source.
Starting a playback always stops and releases the previous source first.
Natural completion calls the caller's on_ended exactly once; an explicit
stop() never does.

The default context plays through the system output device with sounddevice.
Anything implementing PlaybackContext (tests, headless runs) can be injected.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional, Protocol

from storyframe.core.constants import PCM_SAMPLE_RATE
from storyframe.core.exceptions import AudioError
from storyframe.core.logging_config import get_logger

from .pcm import AudioBuffer, decode_audio

logger = get_logger("audio.playback")


class PlaybackSource(Protocol):
    """One playable buffer bound to a context."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def disconnect(self) -> None: ...


class PlaybackContext(Protocol):
    """Creates sources that render into a shared output."""

    def create_source(self, buffer: AudioBuffer, on_finished: Callable[[], None]) -> PlaybackSource: ...

    def close(self) -> None: ...


# =============================================================================
# SOUNDDEVICE BACKEND
# =============================================================================

class SoundDeviceSource:
    """Streams a float32 buffer to the output device on PortAudio's thread."""

    def __init__(self, sd, buffer: AudioBuffer, on_finished: Callable[[], None], device=None):
        self._sd = sd
        self._data = buffer.to_float32_bytes()
        self._frame_bytes = 4 * buffer.channels
        self._position = 0
        self._on_finished = on_finished
        self._stopped = False
        self._closed = False
        self.finished = False
        self._stream = sd.RawOutputStream(
            samplerate=buffer.sample_rate,
            channels=buffer.channels,
            dtype="float32",
            device=device,
            callback=self._fill,
            finished_callback=self._handle_finished,
        )

    def _fill(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Output stream status: {status}")
        wanted = frames * self._frame_bytes
        chunk = self._data[self._position:self._position + wanted]
        self._position += len(chunk)
        outdata[:len(chunk)] = chunk
        if len(chunk) < wanted:
            outdata[len(chunk):] = b"\x00" * (wanted - len(chunk))
            raise self._sd.CallbackStop

    def _handle_finished(self) -> None:
        self.finished = True
        if not self._stopped:
            self._on_finished()

    def start(self) -> None:
        self._stream.start()

    def stop(self) -> None:
        self._stopped = True
        if not self.finished:
            self._stream.abort()

    def disconnect(self) -> None:
        if not self._closed:
            self._closed = True
            self._stream.close()


class SoundDevicePlaybackContext:
    """Shared output context backed by sounddevice."""

    def __init__(self, device=None):
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise AudioError(
                "Audio playback requires the 'sounddevice' package and a PortAudio library",
                {"error": str(e)},
            ) from e
        self._sd = sd
        self.device = device
        self._sources: List[SoundDeviceSource] = []

    def create_source(self, buffer: AudioBuffer, on_finished: Callable[[], None]) -> SoundDeviceSource:
        self._release_finished()
        source = SoundDeviceSource(self._sd, buffer, on_finished, device=self.device)
        self._sources.append(source)
        return source

    def _release_finished(self) -> None:
        # Streams cannot be closed from their own finished callback.
        for source in [s for s in self._sources if s.finished]:
            source.disconnect()
            self._sources.remove(source)

    def close(self) -> None:
        for source in self._sources:
            source.disconnect()
        self._sources.clear()


# =============================================================================
# PLAYER
# =============================================================================

class AudioPlayer:
    """
    Single-voice narration player.

    Usage:
        player = AudioPlayer()
        player.play(clip.audio, on_ended=lambda: print("done"))
        player.stop()
    """

    def __init__(
        self,
        context_factory: Callable[[], PlaybackContext] = None,
        sample_rate: int = PCM_SAMPLE_RATE,
    ):
        self.sample_rate = sample_rate
        self._context_factory = context_factory or SoundDevicePlaybackContext
        self._context: Optional[PlaybackContext] = None
        self._current: Optional[PlaybackSource] = None

    def _get_context(self) -> PlaybackContext:
        if self._context is None:
            self._context = self._context_factory()
        return self._context

    @property
    def is_playing(self) -> bool:
        return self._current is not None

    def play(self, audio_base64: str, on_ended: Optional[Callable[[], None]] = None) -> None:
        """Stop whatever is playing, then play `audio_base64` (base64 PCM)."""
        self.stop()
        context = self._get_context()
        buffer = decode_audio(audio_base64, self.sample_rate)

        source: Optional[PlaybackSource] = None
        ended = threading.Event()

        def finished() -> None:
            if self._current is not source or ended.is_set():
                return
            ended.set()
            self._current = None
            if on_ended:
                on_ended()

        source = context.create_source(buffer, finished)
        self._current = source
        logger.debug(f"Playing {buffer.duration_seconds:.2f}s of narration")
        source.start()

    def stop(self) -> None:
        """Stop and release the active source. No-op when nothing is playing."""
        source = self._current
        if source is None:
            return
        self._current = None
        source.stop()
        source.disconnect()

    def close(self) -> None:
        """Stop playback and release the shared context."""
        self.stop()
        if self._context is not None:
            self._context.close()
            self._context = None
