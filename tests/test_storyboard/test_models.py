"""
Tests for storyboard models and structure decoding.
"""

import base64
import json

import pytest
from pydantic import ValidationError

from storyframe.core.constants import AspectRatio, StyleTheme
from storyframe.core.exceptions import StructureDecodeError
from storyframe.storyboard.models import (
    Clip,
    GenerationRequest,
    Scene,
    Storyboard,
    StoryboardStructure,
    StructureClip,
    decode_image_data_url,
)

from tests.conftest import IMAGE_B64, IMAGE_BYTES, PCM_B64, PCM_BYTES, make_structure


class TestStructureDecoding:
    """Tests for StoryboardStructure.from_json."""

    def test_decodes_four_by_three(self, structure_payload):
        structure = StoryboardStructure.from_json(json.dumps(structure_payload))

        assert [scene.scene for scene in structure.scenes] == [1, 2, 3, 4]
        assert all(len(scene.clips) == 3 for scene in structure.scenes)
        assert structure.total_clips == 12
        assert structure.scenes[1].clips[2].prompt.startswith("Cinematic wide shot S2C3")

    def test_keeps_model_order(self, structure_payload):
        structure = StoryboardStructure.from_json(json.dumps(structure_payload))

        order = [(scene.scene, clip.clip) for scene in structure.scenes for clip in scene.clips]

        assert order == [(s, c) for s in range(1, 5) for c in range(1, 4)]

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_empty_text(self, text):
        with pytest.raises(StructureDecodeError, match="empty response"):
            StoryboardStructure.from_json(text)

    def test_invalid_json(self):
        with pytest.raises(StructureDecodeError, match="invalid JSON") as exc_info:
            StoryboardStructure.from_json("[{\"scene\": 1,")

        assert exc_info.value.raw_text == "[{\"scene\": 1,"

    def test_object_instead_of_array(self, structure_payload):
        with pytest.raises(StructureDecodeError, match="expected a JSON array"):
            StoryboardStructure.from_json(json.dumps({"scenes": structure_payload}))

    def test_too_few_scenes(self):
        with pytest.raises(StructureDecodeError, match="schema violation"):
            StoryboardStructure.from_json(json.dumps(make_structure(scene_count=3)))

    def test_too_many_clips(self):
        with pytest.raises(StructureDecodeError, match="schema violation"):
            StoryboardStructure.from_json(json.dumps(make_structure(clips_per_scene=4)))

    def test_clip_missing_prompt(self, structure_payload):
        del structure_payload[0]["clips"][0]["prompt"]

        with pytest.raises(StructureDecodeError, match="schema violation"):
            StoryboardStructure.from_json(json.dumps(structure_payload))


class TestGenerationRequest:
    """Tests for GenerationRequest."""

    def test_defaults(self):
        request = GenerationRequest(title="T", description="D")

        assert request.style == StyleTheme.REAL
        assert request.aspect_ratio == AspectRatio.PORTRAIT
        assert request.character_images == []

    def test_character_order(self, sample_request):
        second = sample_request.character1.model_copy(update={"mime_type": "image/gif"})
        request = sample_request.model_copy(update={"character1": None, "character2": second})

        assert request.character_images == [second]

    def test_frozen(self, sample_request):
        with pytest.raises(ValidationError):
            sample_request.title = "Changed"

    def test_character_base64(self, sample_request):
        image = sample_request.character1

        assert base64.b64decode(image.base64_data) == image.data
        assert image.mime_type == "image/png"


class TestStoryboard:
    """Tests for Clip and Storyboard."""

    def _clip(self, number):
        return Clip.from_structure(
            StructureClip(clip=number, narration=f"Narasi {number}", prompt=f"Prompt {number}"),
            IMAGE_B64,
            PCM_B64,
        )

    def test_clip_media(self):
        clip = self._clip(1)

        assert clip.image == f"data:image/png;base64,{IMAGE_B64}"
        assert clip.audio == PCM_B64
        assert clip.image_bytes() == IMAGE_BYTES
        assert clip.audio_bytes() == PCM_BYTES
        assert clip.narration == "Narasi 1"

    def test_get_clip(self):
        storyboard = Storyboard(scenes=[Scene(scene=1, clips=[self._clip(1), self._clip(2)])])

        assert storyboard.get_clip(1, 2).prompt == "Prompt 2"
        assert storyboard.get_clip(1, 3) is None
        assert storyboard.get_clip(2, 1) is None
        assert storyboard.total_clips == 2

    def test_json_round_trip_keeps_media(self):
        storyboard = Storyboard(scenes=[Scene(scene=1, clips=[self._clip(1)])])

        restored = Storyboard.model_validate_json(storyboard.model_dump_json())

        assert restored == storyboard


class TestDataUrl:
    """Tests for decode_image_data_url."""

    def test_decodes(self):
        assert decode_image_data_url(f"data:image/png;base64,{IMAGE_B64}") == IMAGE_BYTES

    @pytest.mark.parametrize("value", ["not-a-url", "data:image/png,raw", "data:image/png;base64,@@@"])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            decode_image_data_url(value)
