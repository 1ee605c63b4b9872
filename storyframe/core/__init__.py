"""
Storyframe Core Module

Contains core systems including configuration, constants, exceptions, and logging.
"""

from .config import StoryframeConfig, load_config, get_config, set_config
from .constants import *
from .exceptions import *
from .logging_config import setup_logging, get_logger

__all__ = [
    'StoryframeConfig',
    'load_config',
    'get_config',
    'set_config',
    'setup_logging',
    'get_logger',
]
