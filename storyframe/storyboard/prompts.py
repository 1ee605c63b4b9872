"""
Storyboard prompt templates and the structure response schema.
"""

from typing import Any, Dict

from storyframe.core.constants import SCENE_COUNT, CLIPS_PER_SCENE, DEFAULT_NARRATION_LANGUAGE

from .models import GenerationRequest


# =============================================================================
# PROMPT TEMPLATE DEFINITIONS
# =============================================================================

STRUCTURE_PROMPT_TEMPLATE = """
You are an expert storyboard writer and AI prompt engineer for video creation.
Based on the following story details, create a complete storyboard.

Story Title: "{title}"
Description: "{description}"
Style: "{style}"

Characters:
- Character 1: The main protagonist, based on the first uploaded image.
- Character 2: The secondary protagonist, based on the second uploaded image (if provided).

Your task is to generate a JSON object representing a {scene_count}-scene storyboard.
- Each scene must have {clips_per_scene} clips.
- For each clip, you must provide:
  1. a short, one-sentence narration in {language}.
  2. a detailed, descriptive image generation prompt in English for a {orientation} aspect ratio. This prompt must describe the camera shot (e.g., cinematic wide shot, close-up, over-the-shoulder), the characters' actions, the environment, and the lighting. Describe characters naturally based on the reference images (e.g., "a woman with long silver hair," "a man in a dark coat"). Do not use generic placeholders like "[CHARACTER_1]". The prompt must be consistent with the requested style: "{style}".

The story must be coherent and follow a logical progression. Ensure the characters remain consistent throughout the story.
""".strip()

# Prefix for clip image requests; the clip's English prompt follows.
IMAGE_PROMPT_TEMPLATE = (
    "Using the provided reference images for the characters, "
    "generate an image for the following prompt: {prompt}"
)


def build_structure_prompt(
    request: GenerationRequest,
    language: str = DEFAULT_NARRATION_LANGUAGE,
) -> str:
    """Instruction for the structure call."""
    return STRUCTURE_PROMPT_TEMPLATE.format(
        title=request.title,
        description=request.description,
        style=request.style.value,
        orientation=request.aspect_ratio.orientation,
        language=language,
        scene_count=SCENE_COUNT,
        clips_per_scene=CLIPS_PER_SCENE,
    )


def build_image_prompt(clip_prompt: str) -> str:
    return IMAGE_PROMPT_TEMPLATE.format(prompt=clip_prompt)


def build_structure_schema(language: str = DEFAULT_NARRATION_LANGUAGE) -> Dict[str, Any]:
    """
    Gemini response schema for the structure call.

    An array of exactly SCENE_COUNT scenes, each with exactly CLIPS_PER_SCENE
    clips; every clip needs an integer id, a narration and a prompt.
    """
    clip_schema = {
        "type": "OBJECT",
        "properties": {
            "clip": {"type": "INTEGER"},
            "narration": {"type": "STRING", "description": f"Narration in {language}"},
            "prompt": {"type": "STRING", "description": "Image generation prompt in English"},
        },
        "required": ["clip", "narration", "prompt"],
    }
    scene_schema = {
        "type": "OBJECT",
        "properties": {
            "scene": {"type": "INTEGER"},
            "clips": {
                "type": "ARRAY",
                "items": clip_schema,
                "minItems": str(CLIPS_PER_SCENE),
                "maxItems": str(CLIPS_PER_SCENE),
            },
        },
        "required": ["scene", "clips"],
    }
    return {
        "type": "ARRAY",
        "items": scene_schema,
        "minItems": str(SCENE_COUNT),
        "maxItems": str(SCENE_COUNT),
    }
