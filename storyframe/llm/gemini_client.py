"""
Gemini API Client

Async client for the Gemini `generateContent` REST endpoint, covering the three
request shapes Storyframe needs:

- schema-constrained JSON text (storyboard structure)
- multimodal image synthesis (reference images + prompt -> inline PNG)
- text-to-speech (narration -> inline raw PCM)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from storyframe.core.config import ModelConfig, get_config
from storyframe.core.exceptions import GeminiAPIError
from storyframe.core.logging_config import get_logger
from storyframe.core.startup import require_api_key

logger = get_logger("llm.gemini")


# ============================================================================
#  RESPONSE HELPERS
# ============================================================================

def _first_candidate_parts(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []


def find_inline_data(response: Dict[str, Any]) -> Optional[str]:
    """
    Return the base64 payload of the first inline binary part of the first candidate.

    Returns None when the response has no candidates (blocked prompt), the
    first candidate has no content (blocked or truncated output), or none of
    its parts carries inline data. Callers decide whether None is fatal.
    """
    for part in _first_candidate_parts(response):
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline["data"]
    return None


def extract_text(response: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    return "".join(part.get("text", "") for part in _first_candidate_parts(response))


def describe_block_reason(response: Dict[str, Any]) -> Optional[str]:
    """Best-effort reason a response carries no usable output."""
    feedback = response.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return f"prompt blocked: {feedback['blockReason']}"
    candidates = response.get("candidates") or []
    if not candidates:
        return "no candidates returned"
    finish_reason = candidates[0].get("finishReason")
    if finish_reason and finish_reason != "STOP":
        return f"finish reason: {finish_reason}"
    return None


def inline_part(data_b64: str, mime_type: str) -> Dict[str, Any]:
    """Build an inline binary request part."""
    return {"inlineData": {"mimeType": mime_type, "data": data_b64}}


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


# ============================================================================
#  CLIENT
# ============================================================================

class GeminiClient:
    """
    Client for the Gemini REST API.

    Usage:
        async with GeminiClient() as client:
            response = await client.generate_speech("Hello", voice="Kore")
            audio_b64 = find_inline_data(response)
    """

    MODEL_DISPLAY_NAME = "Gemini"

    def __init__(
        self,
        api_key: str = None,
        config: ModelConfig = None,
        http_client: httpx.AsyncClient = None,
    ):
        self.api_key = api_key or require_api_key()
        self.config = config or get_config().models
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.config.timeout)

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    async def generate_content(
        self,
        model: str,
        contents: List[Dict[str, Any]],
        generation_config: Dict[str, Any] = None,
    ) -> Dict[str, Any]:
        """POST a generateContent request and return the decoded JSON body."""
        url = f"{self.config.base_url}/{model}:generateContent"
        body: Dict[str, Any] = {"contents": contents}
        if generation_config:
            body["generationConfig"] = generation_config

        logger.debug(f"{self.MODEL_DISPLAY_NAME} request -> {model}")

        try:
            response = await self._client.post(url, json=body, headers=self._get_headers())
        except httpx.TimeoutException as e:
            raise GeminiAPIError(f"Request to {model} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise GeminiAPIError(f"Request to {model} failed: {e}") from e

        if response.status_code >= 400:
            raise GeminiAPIError(
                f"HTTP {response.status_code} from {model}: {response.text[:300]}",
                status_code=response.status_code,
                response_text=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GeminiAPIError(
                f"Non-JSON response from {model}",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        model: str = None,
    ) -> str:
        """Generate JSON text constrained to `schema`; returns the raw text."""
        model = model or self.config.structure_model
        response = await self.generate_content(
            model,
            contents=[{"parts": [text_part(prompt)]}],
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        )
        text = extract_text(response)
        if not text:
            reason = describe_block_reason(response)
            if reason:
                logger.warning(f"Empty structured response from {model}: {reason}")
        return text

    async def generate_image(
        self,
        parts: List[Dict[str, Any]],
        aspect_ratio: str = None,
        model: str = None,
    ) -> Dict[str, Any]:
        """Request a single image from reference parts + text."""
        model = model or self.config.image_model
        generation_config: Dict[str, Any] = {"responseModalities": ["IMAGE"]}
        if aspect_ratio:
            generation_config["imageConfig"] = {"aspectRatio": aspect_ratio}
        return await self.generate_content(
            model,
            contents=[{"parts": parts}],
            generation_config=generation_config,
        )

    async def generate_speech(
        self,
        text: str,
        voice: str = None,
        model: str = None,
    ) -> Dict[str, Any]:
        """Synthesize `text` with a prebuilt voice; audio comes back as inline PCM."""
        model = model or self.config.speech_model
        voice = voice or self.config.voice
        return await self.generate_content(
            model,
            contents=[{"parts": [text_part(text)]}],
            generation_config={
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}
                },
            },
        )
