"""
Storyboard export: writes a finished storyboard to a directory.

Layout:
    storyboard.json           full storyboard, media embedded
    scene-<s>-clip-<c>.png    decoded clip image
    scene-<s>-clip-<c>.wav    clip narration as 24 kHz mono WAV
"""

import json
from pathlib import Path
from typing import List

from storyframe.audio.pcm import pcm_to_wav
from storyframe.core.constants import PCM_SAMPLE_RATE
from storyframe.core.logging_config import get_logger

from .models import Storyboard

logger = get_logger("storyboard.export")

STORYBOARD_FILE = "storyboard.json"


def clip_basename(scene_number: int, clip_number: int) -> str:
    return f"scene-{scene_number}-clip-{clip_number}"


def export_storyboard(
    storyboard: Storyboard,
    directory: Path,
    sample_rate: int = PCM_SAMPLE_RATE,
) -> List[Path]:
    """Write the storyboard JSON plus one PNG and one WAV per clip."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    json_path = directory / STORYBOARD_FILE
    json_path.write_text(storyboard.model_dump_json(indent=2), encoding="utf-8")
    written.append(json_path)

    for scene in storyboard.scenes:
        for clip in scene.clips:
            base = clip_basename(scene.scene, clip.clip)

            image_path = directory / f"{base}.png"
            image_path.write_bytes(clip.image_bytes())

            audio_path = directory / f"{base}.wav"
            audio_path.write_bytes(pcm_to_wav(clip.audio_bytes(), sample_rate))

            written.extend([image_path, audio_path])

    logger.info(f"Exported storyboard to {directory} ({len(written)} files)")
    return written


def load_storyboard(directory: Path) -> Storyboard:
    """Read back a storyboard written by export_storyboard."""
    path = Path(directory) / STORYBOARD_FILE
    with open(path, "r", encoding="utf-8") as f:
        return Storyboard.model_validate(json.load(f))
