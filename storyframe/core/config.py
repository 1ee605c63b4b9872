"""
Storyframe Configuration Management

Centralized configuration system with JSON loading and validation.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    GEMINI_BASE_URL,
    STRUCTURE_MODEL,
    IMAGE_MODEL,
    SPEECH_MODEL,
    DEFAULT_VOICE,
    DEFAULT_NARRATION_LANGUAGE,
    PCM_SAMPLE_RATE,
    MAX_IMAGE_BYTES,
)
from .exceptions import ConfigurationError, InvalidConfigError


@dataclass
class ModelConfig:
    """Gemini endpoints and model names for each generation stage."""
    base_url: str = GEMINI_BASE_URL
    structure_model: str = STRUCTURE_MODEL
    image_model: str = IMAGE_MODEL
    speech_model: str = SPEECH_MODEL
    voice: str = DEFAULT_VOICE
    timeout: float = 180.0

    @classmethod
    def from_dict(cls, data: dict) -> 'ModelConfig':
        """Create ModelConfig from dictionary."""
        defaults = cls()
        timeout = data.get('timeout', defaults.timeout)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidConfigError(f"Invalid model timeout: {timeout!r}")
        return cls(
            base_url=data.get('base_url', defaults.base_url).rstrip('/'),
            structure_model=data.get('structure_model', defaults.structure_model),
            image_model=data.get('image_model', defaults.image_model),
            speech_model=data.get('speech_model', defaults.speech_model),
            voice=data.get('voice', defaults.voice),
            timeout=float(timeout),
        )


@dataclass
class AudioConfig:
    """Playback settings."""
    sample_rate: int = PCM_SAMPLE_RATE

    @classmethod
    def from_dict(cls, data: dict) -> 'AudioConfig':
        sample_rate = data.get('sample_rate', PCM_SAMPLE_RATE)
        if not isinstance(sample_rate, int) or sample_rate <= 0:
            raise InvalidConfigError(f"Invalid sample rate: {sample_rate!r}")
        return cls(sample_rate=sample_rate)


@dataclass
class UploadConfig:
    """Character image upload limits."""
    max_image_bytes: int = MAX_IMAGE_BYTES

    @classmethod
    def from_dict(cls, data: dict) -> 'UploadConfig':
        max_image_bytes = data.get('max_image_bytes', MAX_IMAGE_BYTES)
        if isinstance(max_image_bytes, bool) or not isinstance(max_image_bytes, int) or max_image_bytes <= 0:
            raise InvalidConfigError(f"Invalid max_image_bytes: {max_image_bytes!r}")
        return cls(max_image_bytes=max_image_bytes)


@dataclass
class StoryframeConfig:
    """Main configuration class for Storyframe."""

    project_name: str = "Storyframe"
    narration_language: str = DEFAULT_NARRATION_LANGUAGE
    output_dir: Path = field(default_factory=lambda: Path("output"))
    logs_dir: Optional[Path] = None  # session logs are written here when set
    verbose_logging: bool = False

    models: ModelConfig = field(default_factory=ModelConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)

    @classmethod
    def from_dict(cls, data: dict) -> 'StoryframeConfig':
        """Create StoryframeConfig from dictionary."""
        config = cls()

        config.project_name = data.get('project_name', config.project_name)
        config.narration_language = data.get('narration_language', config.narration_language)
        config.verbose_logging = data.get('verbose_logging', config.verbose_logging)

        if 'paths' in data:
            paths = data['paths']
            config.output_dir = Path(paths.get('output_dir', 'output'))
            logs_dir = paths.get('logs_dir')
            config.logs_dir = Path(logs_dir) if logs_dir else None

        if 'models' in data:
            config.models = ModelConfig.from_dict(data['models'])
        if 'audio' in data:
            config.audio = AudioConfig.from_dict(data['audio'])
        if 'uploads' in data:
            config.uploads = UploadConfig.from_dict(data['uploads'])

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a JSON-serializable dictionary."""
        return {
            'project_name': self.project_name,
            'narration_language': self.narration_language,
            'verbose_logging': self.verbose_logging,
            'paths': {
                'output_dir': str(self.output_dir),
                'logs_dir': str(self.logs_dir) if self.logs_dir else None,
            },
            'models': asdict(self.models),
            'audio': asdict(self.audio),
            'uploads': asdict(self.uploads),
        }


def load_config(config_path: Path = None) -> StoryframeConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        Loaded StoryframeConfig instance
    """
    if config_path is None:
        config_path = Path("config/storyframe_config.json")
    config_path = Path(config_path)

    if not config_path.exists():
        return StoryframeConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config: {e}")

    return StoryframeConfig.from_dict(data)


def save_config(config: StoryframeConfig, config_path: Path) -> None:
    """Write configuration to a JSON file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)


# Global config instance
_config: Optional[StoryframeConfig] = None


def get_config() -> StoryframeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[StoryframeConfig]) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
