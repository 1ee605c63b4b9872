"""
Storyboard Pipeline

Turns a GenerationRequest into a fully populated Storyboard:

    1. Structure: one schema-constrained call returns 4 scenes x 3 clips of
       narration + English image prompt.
    2. Media: for each clip in order, the image and speech requests run
       concurrently and both payloads are attached to the clip.

Clips are processed one after another; clip N+1 is not requested until clip
N has finished. Any failure aborts the whole run and nothing partial is
returned.
"""

from __future__ import annotations

import asyncio
import json
from typing import Callable, Optional

from storyframe.core.config import StoryframeConfig, get_config
from storyframe.core.exceptions import ClipMediaError, GeminiAPIError, StructureDecodeError
from storyframe.core.logging_config import get_logger
from storyframe.llm.gemini_client import GeminiClient, find_inline_data, inline_part, text_part

from .models import Clip, GenerationRequest, Scene, Storyboard, StoryboardStructure, StructureClip
from .prompts import build_image_prompt, build_structure_prompt, build_structure_schema

logger = get_logger("storyboard.pipeline")

ProgressCallback = Callable[[str], None]

PROGRESS_MESSAGES = {
    "Indonesian": {
        "analyzing": "Menganalisis cerita dan karakter...",
        "media_start": "Membuat visual untuk setiap klip...",
        "clip": "Membuat visual & audio untuk adegan {scene}, klip {clip}... ({index}/{total})",
        "done": "Selesai!",
    },
    "English": {
        "analyzing": "Analyzing story and characters...",
        "media_start": "Creating visuals for every clip...",
        "clip": "Creating visuals & audio for scene {scene}, clip {clip}... ({index}/{total})",
        "done": "Done!",
    },
}


def progress_messages(language: str) -> dict:
    """Progress text in the narration language; English when there is no translation."""
    return PROGRESS_MESSAGES.get(language, PROGRESS_MESSAGES["English"])


class StoryboardPipeline:
    """
    Sequential storyboard generator over a single GeminiClient.

    Usage:
        async with GeminiClient() as client:
            pipeline = StoryboardPipeline(client)
            storyboard = await pipeline.generate(request, on_progress=print)
    """

    def __init__(self, client: GeminiClient, config: StoryframeConfig = None):
        self.client = client
        self.config = config or get_config()
        self.messages = progress_messages(self.config.narration_language)
        self._on_progress: Optional[ProgressCallback] = None

    async def generate(
        self,
        request: GenerationRequest,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Storyboard:
        """Run structure generation then per-clip media generation."""
        self._on_progress = on_progress

        self._report(self.messages["analyzing"])
        structure = await self.generate_structure(request)

        self._report(self.messages["media_start"])
        total = structure.total_clips
        index = 0
        scenes = []
        for scene in structure.scenes:
            clips = []
            for clip in scene.clips:
                index += 1
                self._report(self.messages["clip"].format(
                    scene=scene.scene, clip=clip.clip, index=index, total=total
                ))
                clips.append(await self.generate_clip_media(request, scene.scene, clip))
            scenes.append(Scene(scene=scene.scene, clips=clips))

        self._report(self.messages["done"])
        logger.info(f"Storyboard complete: '{request.title}' ({len(scenes)} scenes, {total} clips)")
        return Storyboard(scenes=scenes)

    async def generate_structure(self, request: GenerationRequest) -> StoryboardStructure:
        """Ask for the text-only scene/clip skeleton and decode it."""
        language = self.config.narration_language
        prompt = build_structure_prompt(request, language=language)
        logger.info(f"Generating structure for '{request.title}' ({request.style.value}, {request.aspect_ratio.value})")

        try:
            text = await self.client.generate_json(prompt, build_structure_schema(language))
        except GeminiAPIError as e:
            raise StructureDecodeError(f"structure request failed: {e.message}") from e

        structure = StoryboardStructure.from_json(text)
        logger.debug(f"Structure decoded: {len(structure.scenes)} scenes, {structure.total_clips} clips")
        return structure

    async def generate_clip_media(
        self,
        request: GenerationRequest,
        scene_number: int,
        clip: StructureClip,
    ) -> Clip:
        """Request image and narration audio together and attach both to the clip."""
        parts = [inline_part(image.base64_data, image.mime_type) for image in request.character_images]
        parts.append(text_part(build_image_prompt(clip.prompt)))

        image_response, audio_response = await asyncio.gather(
            self.client.generate_image(parts, aspect_ratio=request.aspect_ratio.value),
            self.client.generate_speech(clip.narration),
        )

        image_b64 = find_inline_data(image_response)
        audio_b64 = find_inline_data(audio_response)

        if not image_b64 or not audio_b64:
            logger.error(f"Image response: {json.dumps(image_response, indent=2)[:2000]}")
            logger.error(f"Audio response: {json.dumps(audio_response, indent=2)[:2000]}")
            missing = [name for name, payload in (("image", image_b64), ("audio", audio_b64)) if not payload]
            raise ClipMediaError(scene_number, clip.clip, missing)

        logger.debug(f"Media ready for scene {scene_number}, clip {clip.clip}")
        return Clip.from_structure(clip, image_b64, audio_b64)

    def _report(self, message: str) -> None:
        """Send a progress message; a failing callback never affects the run."""
        if not self._on_progress:
            return
        try:
            self._on_progress(message)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")


async def generate_storyboard(
    request: GenerationRequest,
    on_progress: Optional[ProgressCallback] = None,
    client: GeminiClient = None,
    config: StoryframeConfig = None,
) -> Storyboard:
    """
    Generate a storyboard for `request`.

    A GeminiClient is created (and closed) here when none is passed in.
    """
    config = config or get_config()
    if client is not None:
        return await StoryboardPipeline(client, config).generate(request, on_progress)

    async with GeminiClient(config=config.models) as owned_client:
        return await StoryboardPipeline(owned_client, config).generate(request, on_progress)
