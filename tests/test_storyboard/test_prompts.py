"""
Tests for storyboard prompt builders.
"""

from storyframe.core.constants import AspectRatio, StyleTheme
from storyframe.storyboard.models import GenerationRequest
from storyframe.storyboard.prompts import (
    build_image_prompt,
    build_structure_prompt,
    build_structure_schema,
)


class TestStructurePrompt:
    """Tests for build_structure_prompt."""

    def test_includes_story_details(self):
        request = GenerationRequest(
            title="Kucing Luar Angkasa",
            description="Seekor kucing menjelajahi bulan.",
            style=StyleTheme.STYLE_2D,
            aspect_ratio=AspectRatio.LANDSCAPE,
        )

        prompt = build_structure_prompt(request, language="Indonesian")

        assert 'Story Title: "Kucing Luar Angkasa"' in prompt
        assert 'Description: "Seekor kucing menjelajahi bulan."' in prompt
        assert 'Style: "Style 2D"' in prompt
        assert "4-scene storyboard" in prompt
        assert "Each scene must have 3 clips" in prompt
        assert "narration in Indonesian" in prompt
        assert "for a landscape aspect ratio" in prompt

    def test_portrait_orientation(self):
        request = GenerationRequest(title="T", description="D", aspect_ratio="9:16")

        assert "for a portrait aspect ratio" in build_structure_prompt(request)

    def test_language_is_configurable(self):
        request = GenerationRequest(title="T", description="D")

        assert "narration in English" in build_structure_prompt(request, language="English")


class TestImagePrompt:
    def test_wraps_clip_prompt(self):
        prompt = build_image_prompt("A close-up of a knight")

        assert prompt.startswith("Using the provided reference images")
        assert prompt.endswith("generate an image for the following prompt: A close-up of a knight")


class TestStructureSchema:
    """Tests for build_structure_schema."""

    def test_shape_constraints(self):
        schema = build_structure_schema()

        assert schema["type"] == "ARRAY"
        assert schema["minItems"] == schema["maxItems"] == "4"
        clips = schema["items"]["properties"]["clips"]
        assert clips["minItems"] == clips["maxItems"] == "3"
        assert schema["items"]["required"] == ["scene", "clips"]
        assert clips["items"]["required"] == ["clip", "narration", "prompt"]

    def test_narration_language_description(self):
        schema = build_structure_schema("Indonesian")

        narration = schema["items"]["properties"]["clips"]["items"]["properties"]["narration"]
        assert narration == {"type": "STRING", "description": "Narration in Indonesian"}
