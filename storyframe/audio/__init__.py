"""
Storyframe Audio Module

PCM decoding, WAV export and narration playback.
"""

from .pcm import AudioBuffer, decode_audio, decode_pcm16, pcm_to_wav
from .playback import AudioPlayer, PlaybackContext, PlaybackSource, SoundDevicePlaybackContext

__all__ = [
    'AudioBuffer',
    'decode_audio',
    'decode_pcm16',
    'pcm_to_wav',
    'AudioPlayer',
    'PlaybackContext',
    'PlaybackSource',
    'SoundDevicePlaybackContext',
]
