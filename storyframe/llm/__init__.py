"""
Storyframe LLM Module

Gemini REST client used by the storyboard pipeline.
"""

from .gemini_client import (
    GeminiClient,
    find_inline_data,
    extract_text,
    inline_part,
    text_part,
)

__all__ = [
    'GeminiClient',
    'find_inline_data',
    'extract_text',
    'inline_part',
    'text_part',
]
