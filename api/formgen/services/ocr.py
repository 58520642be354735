"""
OCR Fallback Client
Reads text from page images using the generative model in image-to-text mode.
"""
from typing import Optional

from formgen.config import get_prompt
from formgen.errors import OcrError
from formgen.logging_utils import get_logger
from formgen.services.llm import StructuredModel, get_model

logger = get_logger(__name__)

OCR_FAILED_MESSAGE = "Failed to perform OCR on the image. The service might be unavailable."


def extract_text_from_image(
    png_bytes: bytes,
    model: Optional[StructuredModel] = None,
    api_key: Optional[str] = None,
) -> str:
    """
    Extracts all visible text from a PNG image.

    Args:
        png_bytes: Encoded PNG image.
        model: Structured generation provider (defaults to Gemini).
        api_key: Key for the default provider when no model is given.

    Returns:
        Extracted text with line breaks preserved.

    Raises:
        OcrError: If the upstream call fails.
        ValueError: If no model is given and GEMINI_API_KEY is not configured.
    """
    if model is None:
        model = get_model(api_key)

    try:
        return model.extract_text(png_bytes, get_prompt("ocr"))
    except Exception as e:
        logger.exception("Error extracting text from image (%d bytes)", len(png_bytes))
        raise OcrError(OCR_FAILED_MESSAGE) from e
