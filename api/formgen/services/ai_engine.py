"""
AI Engine Service
Turns document text into a structured Form through a single structured-generation call.
"""
import json
from typing import Any, Optional

from pydantic import ValidationError

from formgen.config import PROMPT_VERSION, build_form_prompt
from formgen.errors import GenerationError
from formgen.logging_utils import get_logger
from formgen.schemas import Form
from formgen.services.llm import StructuredModel, get_model
from formgen.services.sanitizer import sanitize

logger = get_logger(__name__)

EMPTY_INPUT_MESSAGE = "Please provide some text or upload a file to generate a form."
UPSTREAM_MESSAGE = (
    "Failed to generate form from AI. The service might be temporarily "
    "unavailable or the input is too complex."
)
MALFORMED_MESSAGE = (
    "The AI's response couldn't be processed. This can happen with complex "
    "requests. Please try simplifying or rephrasing your input."
)
MISSING_FIELDS_MESSAGE = "AI response is missing required fields (title, description, or items)."
INVALID_ITEMS_MESSAGE = "AI response contains items that do not match the form schema."


def has_required_fields(payload: Any) -> bool:
    """Top-level shape check: non-empty title and description, items as a list."""
    if not isinstance(payload, dict):
        return False
    title = payload.get("title")
    description = payload.get("description")
    return (
        isinstance(title, str) and bool(title.strip())
        and isinstance(description, str) and bool(description.strip())
        and isinstance(payload.get("items"), list)
    )


def parse_form_response(raw_text: str) -> Form:
    """
    Parses raw model output into a Form.

    Args:
        raw_text: Text returned by the model.

    Returns:
        Validated Form.

    Raises:
        GenerationError: With reason "malformed_json", "missing_fields" or "invalid_items".
    """
    cleaned = sanitize(raw_text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Model returned unparsable JSON: %s; head=%r", e, cleaned[:200])
        raise GenerationError(MALFORMED_MESSAGE, reason="malformed_json") from e

    if not has_required_fields(payload):
        keys = sorted(payload) if isinstance(payload, dict) else type(payload).__name__
        logger.error("Model response missing required fields: %s", keys)
        raise GenerationError(MISSING_FIELDS_MESSAGE, reason="missing_fields")

    try:
        return Form.model_validate(payload)
    except ValidationError as e:
        logger.error("Model response failed item validation: %s", e)
        raise GenerationError(INVALID_ITEMS_MESSAGE, reason="invalid_items") from e


def generate_form(
    document_text: str,
    model: Optional[StructuredModel] = None,
    *,
    prefer_choice_questions: bool = True,
) -> Form:
    """
    Generates a Form from free-form document text.

    Args:
        document_text: Pasted or extracted text.
        model: Structured generation provider (defaults to Gemini).
        prefer_choice_questions: Ask the model to convert factual questions into choice questions.

    Returns:
        The generated Form.

    Raises:
        GenerationError: On empty input, upstream failure, malformed JSON or missing fields.
        ValueError: If no model is given and GEMINI_API_KEY is not configured.
    """
    if not document_text or not document_text.strip():
        raise GenerationError(EMPTY_INPUT_MESSAGE, reason="empty_input")

    prompt = build_form_prompt(document_text, prefer_choice_questions)
    logger.info(
        "Generating form (prompt %s, %d chars of input, prefer_choice=%s)",
        PROMPT_VERSION,
        len(document_text),
        prefer_choice_questions,
    )

    if model is None:
        model = get_model()

    try:
        raw_text = model.generate_json(prompt)
    except Exception as e:
        logger.exception("Error generating form from model")
        raise GenerationError(UPSTREAM_MESSAGE, reason="upstream") from e

    form = parse_form_response(raw_text)
    logger.info("Generated form %r with %d items", form.title, len(form.items))
    return form
