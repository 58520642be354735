"""
Configuration Module for Form Gen
Centralizes environment variables, API settings, tunable thresholds and prompt templates.
"""
import os
from dotenv import load_dotenv

# --- API Configuration ---
MODEL_NAME = "gemini-2.5-flash"
OCR_MODEL_NAME = "gemini-2.5-flash"

# Low temperature favors reproducible structure over creativity
GENERATION_TEMPERATURE = 0.1
OCR_TEMPERATURE = 0.0
THINKING_BUDGET = 0

# --- Ingestion thresholds (tunable) ---
# A PDF page is treated as image-only when its extracted text is shorter than
# OCR_MIN_TEXT_CHARS and its height (scale 1.0, PDF points) exceeds OCR_MIN_PAGE_HEIGHT.
OCR_MIN_TEXT_CHARS = 50
OCR_MIN_PAGE_HEIGHT = 100
OCR_RENDER_SCALE = 2.0

# --- Google Forms ---
FORMS_API_BASE = "https://forms.googleapis.com/v1"
FORMS_SCOPE = "https://www.googleapis.com/auth/forms.body"


def get_api_key() -> str:
    """
    Validates and returns the Gemini API Key.

    Raises:
        ValueError: If GEMINI_API_KEY is not found in environment.
    """
    # Load environment variables fresh (for testing and reload scenarios)
    load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY")

    if not api_key:
        raise ValueError(
            "GEMINI_API_KEY not found. "
            "Please create a .env file with your API key."
        )
    return api_key


def get_forms_client_id() -> str:
    """Return the OAuth client id used for Google sign-in, or an empty string."""
    load_dotenv()
    return (os.getenv("GOOGLE_CLIENT_ID") or "").strip()


def get_export_mode() -> str:
    """
    Selects the export mode from static configuration.

    Returns:
        "api" when a Google OAuth client id is configured (direct Forms API export),
        otherwise "script" (generated Apps Script export).
    """
    return "api" if get_forms_client_id() else "script"


# --- Prompt Templates ---
# Bump PROMPT_VERSION whenever the wording of a template changes.
PROMPT_VERSION = "form-architect/v1"

CHOICE_RULES = {
    True: """3.  **Prioritize Choice Questions:** Whenever it is reasonable, you MUST convert questions that could be a 'SHORT_ANSWER' into a choice-based question type instead.
    - For questions with a single, factual answer (e.g., "What is the capital of France?"), convert them to `MULTIPLE_CHOICE`. You are responsible for creating plausible incorrect options (distractors).
    - Favor `DROPDOWN` for fill-in-the-blank style questions.
    - Only use `SHORT_ANSWER` if the question is open-ended but still gradable, or if generating choices is not practical.""",
    False: """3.  **Keep Question Formats:** Do NOT invent answer choices for questions that do not provide them.
    - Questions with a single, factual answer and no listed options (e.g., "What is the capital of France?") MUST stay `SHORT_ANSWER` and be graded as described below.
    - Only use `MULTIPLE_CHOICE`, `CHECKBOXES` or `DROPDOWN` when the text itself lists the options or provides a word bank.""",
}

CAPITAL_EXAMPLES = {
    True: """{ "title": "What is the capital of Japan?", "type": "MULTIPLE_CHOICE", "options": ["Tokyo", "Kyoto", "Osaka"], "points": 1, "correctAnswer": "Tokyo", "required": true }""",
    False: """{ "title": "What is the capital of Japan?", "type": "SHORT_ANSWER", "points": 1, "correctAnswer": "Tokyo", "required": true }""",
}

PROMPT_TEMPLATES = {
    "form_architect": """
You are an expert 'Quiz Architect AI'. Your single, most important mission is to convert the provided text into a perfectly structured JSON object for a Google Form that can be automatically graded. To do this, you MUST identify the correct answer for every gradable question and assign it points.

**CRITICAL RULES:**
1.  Your output MUST be a single, valid JSON object. Do not include any surrounding text, explanations, or markdown fences (like ```json). The entire response must be raw JSON.
2.  The root of the JSON object MUST have three keys: "title", "description", and "items". You must always generate a suitable title and description.
3.  Strictly follow all JSON syntax rules. No trailing commas.

**JSON STRUCTURE:**
{{
  "title": "string",
  "description": "string",
  "items": [
    {{
      "title": "string",
      "description": "string", // ONLY for 'SECTION_HEADER'. Holds the passage text. Omit for all other types.
      "type": "ONE_OF_ENUM",
      "options": ["string"], // This key MUST be omitted if 'type' is not 'MULTIPLE_CHOICE', 'CHECKBOXES', or 'DROPDOWN'.
      "points": number,      // MUST include for gradable questions. Default to 1 if not specified.
      "correctAnswer": "string" | ["string"], // MUST include for gradable questions. Use an array of strings ONLY for 'CHECKBOXES'.
      "required": boolean    // Omit if not required.
    }}
  ]
}}

**VALID ITEM TYPES ('type' field):**
- 'SHORT_ANSWER'
- 'PARAGRAPH'
- 'MULTIPLE_CHOICE'
- 'CHECKBOXES'
- 'DROPDOWN'
- 'SECTION_HEADER' // Use this for text blocks, like reading passages.

**PARSING, GRADING, AND ANSWERING INSTRUCTIONS (MANDATORY):**
1.  **Name Field:** The first item in the "items" array MUST always be a 'Name' question: `{{ "title": "Name", "type": "SHORT_ANSWER", "required": true }}`. It should not have points.
2.  **Required Questions**: All gradable questions (`MULTIPLE_CHOICE`, `CHECKBOXES`, `DROPDOWN`, and gradable `SHORT_ANSWER`) MUST be made mandatory by adding `"required": true`.
{choice_rule}
4.  **Reading Passages:** For reading exercises, use a `SECTION_HEADER` item for the passage text itself, followed by the related questions.
5.  **Fill-in-the-Blank Questions:**
    - If you find a passage with blanks (e.g., `___` or `[BLANK]`) and a list of words (a "word bank"), you MUST handle it as follows:
    - First, create a `SECTION_HEADER` item. The `title` can be "Passage" or similar, and the `description` MUST contain the full passage with the blanks and the word bank.
    - Then, for EACH blank, create a separate `DROPDOWN` question.
    - The `title` for each dropdown should identify which blank it corresponds to (e.g., "Blank #1: 'The ___ is blue.'").
    - The `options` for EACH dropdown MUST be the complete list of words from the word bank.
    - You MUST identify the correct word for that specific blank and set it as the `correctAnswer`.
    - These `DROPDOWN` questions MUST be gradable: include `"points": 1` and `"required": true`.
6.  **Cleanliness:** Remove prefixes like "Q1." or "A)" from titles and options.
7.  **GRADING AND ANSWER IDENTIFICATION (YOUR #1 PRIORITY):**
    - Your purpose is to create a quiz, not just a form. Therefore, you must be aggressive in identifying correct answers and making questions gradable.
    - **`MULTIPLE_CHOICE` / `CHECKBOXES` / `DROPDOWN`:**
        - These questions are ALWAYS gradable.
        - You MUST include a `"points": 1` (or more, if specified).
        - You MUST include the `"correctAnswer"` key. Find the correct answer in the text.
        - For `CHECKBOXES`, `correctAnswer` MUST be an array of strings (e.g., `["Answer A", "Answer C"]`). For others, it's a single string.
        - The value(s) in `correctAnswer` must exactly match one of the values in the `options` array.
    - **`SHORT_ANSWER`:**
        - Make this type gradable whenever possible, but follow rule #3 on question formats.
        - If the answer is objective and factual (e.g., "What is the capital of France?", "Solve for x"), you MUST treat it as a gradable question.
        - For gradable `SHORT_ANSWER` questions, you MUST include `"points": 1`, the `"correctAnswer"` key with the precise string answer, and `"required": true`.
        - ONLY if the answer is subjective or an opinion (e.g., "What did you think?"), should you OMIT `points` and `correctAnswer`.
    - **Non-Gradable Types:**
        - `PARAGRAPH`, `SECTION_HEADER`: These are never graded. You MUST OMIT `points` and `correctAnswer` for these types.

---
**EXAMPLE 1: Quiz with various questions**
Input Text: "Geography Quiz. 1. What is the capital of Japan? The answer is Tokyo. 2. Which two of the following are continents? A) Asia, B) Pacific, C) Africa. Correct answers are Asia and Africa. 3. What are your thoughts on geography?"
Correct JSON Output:
{{
  "title": "Geography Quiz",
  "description": "A quiz about world geography.",
  "items": [
    {{ "title": "Name", "type": "SHORT_ANSWER", "required": true }},
    {capital_example},
    {{ "title": "Which two of the following are continents?", "type": "CHECKBOXES", "options": ["Asia", "Pacific", "Africa"], "points": 1, "correctAnswer": ["Asia", "Africa"], "required": true }},
    {{ "title": "What are your thoughts on geography?", "type": "PARAGRAPH" }}
  ]
}}

---
**EXAMPLE 2: Fill-in-the-Blank Quiz**
Input Text: "Complete the sentences. Use these words: [sky, car]. 1. The ___ is blue. 2. A ___ has four wheels."
Correct JSON Output:
{{
  "title": "Sentence Completion",
  "description": "Complete the sentences with the correct words.",
  "items": [
    {{ "title": "Name", "type": "SHORT_ANSWER", "required": true }},
    {{
      "title": "Passage",
      "type": "SECTION_HEADER",
      "description": "Complete the sentences using the word bank below.\\n\\n1. The ___ is blue.\\n2. A ___ has four wheels.\\n\\nWord Bank: [sky, car]"
    }},
    {{ "title": "Sentence 1: The ___ is blue.", "type": "DROPDOWN", "options": ["sky", "car"], "points": 1, "correctAnswer": "sky", "required": true }},
    {{ "title": "Sentence 2: A ___ has four wheels.", "type": "DROPDOWN", "options": ["sky", "car"], "points": 1, "correctAnswer": "car", "required": true }}
  ]
}}

---
**Text to Analyze:**
---
{document_text}
---
""",

    "ocr": "Perform OCR on this image. Extract all visible text exactly as it appears. Maintain paragraph and line breaks.",
}


def get_prompt(prompt_type: str, **kwargs) -> str:
    """
    Retrieves a formatted prompt template.

    Args:
        prompt_type: Template name ("form_architect" or "ocr").
        **kwargs: Variables to format into the template.

    Returns:
        Formatted prompt string.

    Raises:
        KeyError: If prompt_type is not found in templates.
    """
    if prompt_type not in PROMPT_TEMPLATES:
        raise KeyError(f"Prompt template '{prompt_type}' not found.")

    return PROMPT_TEMPLATES[prompt_type].format(**kwargs)


def build_form_prompt(document_text: str, prefer_choice_questions: bool = True) -> str:
    """Render the form architect prompt for a piece of document text."""
    return get_prompt(
        "form_architect",
        document_text=document_text,
        choice_rule=CHOICE_RULES[prefer_choice_questions],
        capital_example=CAPITAL_EXAMPLES[prefer_choice_questions],
    )
