"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

import asyncio
import base64
import io
import json
import re
import shutil
import struct
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest
from PIL import Image

from storyframe.core.config import StoryframeConfig, set_config
from storyframe.storyboard.models import GenerationRequest, CharacterImage


# =============================================================================
# SAMPLE DATA
# =============================================================================

PCM_SAMPLES = [0, 1, -1, 16384, -16384, 32767, -32768]
PCM_BYTES = struct.pack(f"<{len(PCM_SAMPLES)}h", *PCM_SAMPLES)
PCM_B64 = base64.b64encode(PCM_BYTES).decode("ascii")

# Tiny valid payload; the pipeline never decodes images
IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
IMAGE_B64 = base64.b64encode(IMAGE_BYTES).decode("ascii")

_PROMPT_ID = re.compile(r"shot S(\d+)C(\d+)")


def make_image_bytes(image_format: str = "PNG", size=(4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


def make_structure(scene_count: int = 4, clips_per_scene: int = 3) -> List[Dict[str, Any]]:
    """Structure payload whose prompts encode their scene/clip position."""
    return [
        {
            "scene": s,
            "clips": [
                {
                    "clip": c,
                    "narration": f"Narasi adegan {s} klip {c}.",
                    "prompt": f"Cinematic wide shot S{s}C{c} of two travellers at dusk",
                }
                for c in range(1, clips_per_scene + 1)
            ],
        }
        for s in range(1, scene_count + 1)
    ]


def inline_response(data_b64: str, mime_type: str) -> Dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": data_b64}}]},
                "finishReason": "STOP",
            }
        ]
    }


def text_response(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


BLOCKED_RESPONSE = {"promptFeedback": {"blockReason": "SAFETY"}}


# =============================================================================
# FAKE GEMINI CLIENT
# =============================================================================

class FakeGeminiClient:
    """
    Stand-in for GeminiClient.

    Image prompts carry "S<scene>C<clip>", so a clip can be targeted for a
    missing payload. Every call start/end is recorded in `events`.
    """

    def __init__(
        self,
        structure_text: Optional[str] = None,
        missing_image: Set[tuple] = None,
        missing_audio: Set[tuple] = None,
    ):
        self.structure_text = structure_text if structure_text is not None else json.dumps(make_structure())
        self.missing_image = missing_image or set()
        self.missing_audio = missing_audio or set()
        self.events: List[str] = []
        self.image_calls: List[Dict[str, Any]] = []
        self.speech_calls: List[str] = []
        self.json_calls: List[Dict[str, Any]] = []
        self.closed = False

    async def generate_json(self, prompt, schema, model=None) -> str:
        self.json_calls.append({"prompt": prompt, "schema": schema})
        self.events.append("structure")
        return self.structure_text

    async def generate_image(self, parts, aspect_ratio=None, model=None) -> Dict[str, Any]:
        scene, clip = (int(x) for x in _PROMPT_ID.search(parts[-1]["text"]).groups())
        self.image_calls.append({"parts": parts, "aspect_ratio": aspect_ratio, "scene": scene, "clip": clip})
        self.events.append(f"image-start S{scene}C{clip}")
        await asyncio.sleep(0)
        self.events.append(f"image-end S{scene}C{clip}")
        if (scene, clip) in self.missing_image:
            return BLOCKED_RESPONSE
        return inline_response(IMAGE_B64, "image/png")

    async def generate_speech(self, text, voice=None, model=None) -> Dict[str, Any]:
        scene, clip = (int(x) for x in re.search(r"adegan (\d+) klip (\d+)", text).groups())
        self.speech_calls.append(text)
        self.events.append(f"audio-start S{scene}C{clip}")
        await asyncio.sleep(0)
        self.events.append(f"audio-end S{scene}C{clip}")
        if (scene, clip) in self.missing_audio:
            return {"candidates": [{"content": {"parts": []}, "finishReason": "OTHER"}]}
        return inline_response(PCM_B64, "audio/L16;codec=pcm;rate=24000")

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the built-in defaults."""
    config = StoryframeConfig()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def sample_request(png_bytes) -> GenerationRequest:
    """Request with one character image."""
    return GenerationRequest(
        title="Petualangan di Hutan Kristal",
        description="Seorang ksatria dan naganya mencari artefak kuno.",
        style="Style 3D",
        aspect_ratio="16:9",
        character1=CharacterImage.from_bytes(png_bytes, "image/png"),
    )


@pytest.fixture
def structure_payload() -> List[Dict[str, Any]]:
    return make_structure()


@pytest.fixture
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()
