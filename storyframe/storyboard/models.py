"""
Storyboard data models.

GenerationRequest is what a user submits. StoryboardStructure is the text-only
skeleton returned by the structure call. Storyboard is the same tree with an
image and narration audio attached to every clip.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storyframe.core.constants import (
    AspectRatio,
    StyleTheme,
    SCENE_COUNT,
    CLIPS_PER_SCENE,
    DEFAULT_STYLE,
    DEFAULT_ASPECT_RATIO,
)
from storyframe.core.exceptions import StructureDecodeError

IMAGE_DATA_URL_PREFIX = "data:image/png;base64,"


class CharacterImage(BaseModel):
    """A character reference image: raw bytes, base64 text and MIME type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    base64_data: str = Field(repr=False)
    mime_type: str

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "CharacterImage":
        return cls(
            data=data,
            base64_data=base64.b64encode(data).decode("ascii"),
            mime_type=mime_type,
        )


class GenerationRequest(BaseModel):
    """Story details submitted by the user. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    style: StyleTheme = DEFAULT_STYLE
    aspect_ratio: AspectRatio = DEFAULT_ASPECT_RATIO
    character1: Optional[CharacterImage] = None
    character2: Optional[CharacterImage] = None

    @property
    def character_images(self) -> List[CharacterImage]:
        """Supplied reference images, character one first."""
        return [image for image in (self.character1, self.character2) if image is not None]


# =============================================================================
# STRUCTURE (stage one)
# =============================================================================

class StructureClip(BaseModel):
    clip: int
    narration: str
    prompt: str


class StructureScene(BaseModel):
    scene: int
    clips: List[StructureClip] = Field(min_length=CLIPS_PER_SCENE, max_length=CLIPS_PER_SCENE)


class StoryboardStructure(BaseModel):
    """Scene/clip skeleton with narration and image prompts only."""

    scenes: List[StructureScene] = Field(min_length=SCENE_COUNT, max_length=SCENE_COUNT)

    @classmethod
    def from_json(cls, text: str) -> "StoryboardStructure":
        """
        Decode the structure call's JSON text.

        The response is a bare JSON array of scene objects. Anything that does
        not parse, or that breaks the 4 x 3 shape, raises StructureDecodeError.
        """
        if not text or not text.strip():
            raise StructureDecodeError("empty response", raw_text=text)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StructureDecodeError(f"invalid JSON: {e}", raw_text=text) from e

        if not isinstance(data, list):
            raise StructureDecodeError(
                f"expected a JSON array of scenes, got {type(data).__name__}",
                raw_text=text,
            )

        try:
            return cls.model_validate({"scenes": data})
        except ValidationError as e:
            raise StructureDecodeError(
                f"schema violation: {e.error_count()} error(s): {e.errors()[0]['msg']}",
                raw_text=text,
            ) from e

    @property
    def total_clips(self) -> int:
        return sum(len(scene.clips) for scene in self.scenes)


# =============================================================================
# STORYBOARD (final)
# =============================================================================

class Clip(StructureClip):
    """A clip with its generated image (PNG data URL) and audio (base64 PCM)."""

    image: str = Field(repr=False)
    audio: str = Field(repr=False)

    @classmethod
    def from_structure(cls, clip: StructureClip, image_b64: str, audio_b64: str) -> "Clip":
        return cls(
            **clip.model_dump(),
            image=f"{IMAGE_DATA_URL_PREFIX}{image_b64}",
            audio=audio_b64,
        )

    def image_bytes(self) -> bytes:
        """Decode the embedded PNG."""
        return decode_image_data_url(self.image)

    def audio_bytes(self) -> bytes:
        """Decode the raw PCM narration."""
        return base64.b64decode(self.audio)


class Scene(BaseModel):
    scene: int
    clips: List[Clip]


class Storyboard(BaseModel):
    """Final storyboard: the structure tree with media attached."""

    scenes: List[Scene]

    @property
    def total_clips(self) -> int:
        return sum(len(scene.clips) for scene in self.scenes)

    def get_clip(self, scene_number: int, clip_number: int) -> Optional[Clip]:
        for scene in self.scenes:
            if scene.scene != scene_number:
                continue
            for clip in scene.clips:
                if clip.clip == clip_number:
                    return clip
        return None


def decode_image_data_url(data_url: str) -> bytes:
    """Decode a `data:<mime>;base64,<payload>` reference into bytes."""
    if not data_url.startswith("data:") or ";base64," not in data_url:
        raise ValueError("Not a base64 data URL")
    payload = data_url.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
