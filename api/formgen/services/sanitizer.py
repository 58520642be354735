"""
Response Sanitizer
Repairs near-valid JSON text emitted by the generative model.
"""
import re

# Whole payload wrapped in one fence, with an optional language tag (```json ... ```)
FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
# A comma followed only by whitespace before a closing brace or bracket
TRAILING_COMMA_RE = re.compile(r",(?=\s*[}\]])")


def strip_code_fence(text: str) -> str:
    """Return the interior of a single surrounding fenced block, or the text unchanged."""
    stripped = text.strip()
    match = FENCE_RE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def remove_trailing_commas(text: str) -> str:
    return TRAILING_COMMA_RE.sub("", text)


def sanitize(raw: str) -> str:
    """
    Prepares model output for strict JSON parsing.

    Only two repairs are attempted: unwrapping a markdown fence and dropping
    trailing commas. Anything else is left for the JSON parser to reject.

    Args:
        raw: Raw text returned by the model.

    Returns:
        Text suitable for json.loads.
    """
    return remove_trailing_commas(strip_code_fence(raw or ""))
