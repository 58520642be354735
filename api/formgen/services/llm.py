"""
Generative Model Client
Provider-neutral structured generation interface with a Google Gemini implementation.
"""
from typing import Optional, Protocol
from google import genai
from google.genai import types

from formgen.config import (
    GENERATION_TEMPERATURE,
    MODEL_NAME,
    OCR_MODEL_NAME,
    OCR_TEMPERATURE,
    THINKING_BUDGET,
    get_api_key,
)
from formgen.logging_utils import get_logger, safe_key_fingerprint

logger = get_logger(__name__)


class StructuredModel(Protocol):
    """What the form generator and OCR client need from a model provider."""

    def generate_json(self, prompt: str) -> str:
        """Return raw text expected to hold a single JSON document."""
        ...

    def extract_text(self, png_bytes: bytes, instruction: str) -> str:
        """Return the text visible in a PNG image."""
        ...


def get_client(api_key: Optional[str] = None) -> genai.Client:
    """
    Creates and returns a configured Gemini API client.

    Args:
        api_key: Optional key overriding GEMINI_API_KEY.

    Returns:
        genai.Client: Authenticated Gemini client.

    Raises:
        ValueError: If API key is not configured.
    """
    resolved_key = api_key.strip() if api_key else ""
    if not resolved_key:
        resolved_key = get_api_key()
    logger.debug("Creating Gemini client (key %s)", safe_key_fingerprint(resolved_key))
    return genai.Client(api_key=resolved_key)


class GeminiModel:
    """StructuredModel backed by the google-genai SDK."""

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        *,
        model_name: str = MODEL_NAME,
        ocr_model_name: str = OCR_MODEL_NAME,
    ):
        self.client = client if client is not None else get_client()
        self.model_name = model_name
        self.ocr_model_name = ocr_model_name

    def generate_json(self, prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=GENERATION_TEMPERATURE,
                thinking_config=types.ThinkingConfig(thinking_budget=THINKING_BUDGET),
            ),
        )
        return response.text or ""

    def extract_text(self, png_bytes: bytes, instruction: str) -> str:
        image_part = types.Part.from_bytes(data=png_bytes, mime_type="image/png")
        response = self.client.models.generate_content(
            model=self.ocr_model_name,
            contents=[image_part, instruction],
            config=types.GenerateContentConfig(
                temperature=OCR_TEMPERATURE,
                thinking_config=types.ThinkingConfig(thinking_budget=THINKING_BUDGET),
            ),
        )
        return response.text or ""


def get_model(api_key: Optional[str] = None) -> StructuredModel:
    """Default model provider for the application."""
    return GeminiModel(get_client(api_key))
