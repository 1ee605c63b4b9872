"""
Tests for the exception hierarchy, API key lookup and startup validation.
"""

import pytest

from storyframe.core import env_loader
from storyframe.core.exceptions import (
    ClipMediaError,
    GeminiAPIError,
    InvalidRequestError,
    MissingConfigError,
    PipelineError,
    StoryframeError,
    StructureDecodeError,
)
from storyframe.core.startup import require_api_key, validate_environment

KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@pytest.fixture
def no_keys(monkeypatch):
    """Clear every Gemini key and skip .env loading."""
    for name in KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(env_loader, "_env_loaded", True)


class TestExceptions:
    """Tests for StoryframeError subclasses."""

    def test_details_in_str(self):
        error = StoryframeError("Something broke", {"step": "structure"})

        assert str(error) == "Something broke | Details: {'step': 'structure'}"
        assert error.message == "Something broke"

    def test_clip_media_error_names_scene_and_clip(self):
        error = ClipMediaError(2, 3, ["image"])

        assert isinstance(error, PipelineError)
        assert error.scene == 2
        assert error.clip == 3
        assert error.missing == ["image"]
        assert "clip 3 in scene 2" in error.message
        assert "no image returned" in error.message

    def test_clip_media_error_both_missing(self):
        error = ClipMediaError(1, 1, ["image", "audio"])

        assert "no image or audio returned" in error.message

    def test_structure_decode_error_truncates_raw_text(self):
        error = StructureDecodeError("invalid JSON", raw_text="x" * 2000)

        assert error.message.startswith("Storyboard structure could not be decoded")
        assert len(error.details["raw_text"]) == 500
        assert len(error.raw_text) == 2000

    def test_invalid_request_error_fields(self):
        error = InvalidRequestError("title", "story title is required")

        assert error.field == "title"
        assert error.reason == "story title is required"
        assert "'title'" in error.message

    def test_gemini_api_error_status(self):
        error = GeminiAPIError("HTTP 429", status_code=429, response_text="quota")

        assert error.status_code == 429
        assert error.details == {"status_code": 429}


class TestApiKeyLookup:
    """Tests for env_loader.get_google_api_key."""

    def test_primary_key_wins(self, no_keys, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "primary")
        monkeypatch.setenv("GOOGLE_API_KEY", "secondary")

        assert env_loader.get_google_api_key() == "primary"

    def test_fallback_key(self, no_keys, monkeypatch):
        monkeypatch.setenv("API_KEY", "  fallback  ")

        assert env_loader.get_google_api_key() == "fallback"

    def test_blank_key_ignored(self, no_keys, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "   ")

        assert env_loader.get_google_api_key() is None


class TestStartupValidation:
    """Tests for validate_environment."""

    def test_missing_key_is_an_error(self, no_keys):
        result = validate_environment()

        assert not result.valid
        assert any("GEMINI_API_KEY" in error for error in result.errors)

    def test_key_present_is_valid(self, no_keys, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")

        result = validate_environment()

        assert result.valid
        assert result.errors == []

    def test_require_api_key_raises(self, no_keys):
        with pytest.raises(MissingConfigError):
            require_api_key()
