"""
Pytest Configuration & Shared Fixtures
"""
import json

import pytest
from unittest.mock import MagicMock

from formgen.schemas import Form, FormItem, ItemType


TOKYO_RESPONSE = {
    "title": "Geography Quiz",
    "description": "A quick question about Japan.",
    "items": [
        {"title": "Name", "type": "SHORT_ANSWER", "required": True},
        {
            "title": "What is the capital of Japan?",
            "type": "MULTIPLE_CHOICE",
            "options": ["Tokyo", "Kyoto", "Osaka"],
            "points": 1,
            "correctAnswer": "Tokyo",
            "required": True,
        },
    ],
}


@pytest.fixture
def tokyo_json():
    """Model output for the capital-of-Japan scenario."""
    return json.dumps(TOKYO_RESPONSE, indent=2)


@pytest.fixture
def mock_model(tokyo_json):
    """StructuredModel stand-in to avoid real API calls."""
    model = MagicMock()
    model.generate_json.return_value = tokyo_json
    model.extract_text.return_value = "OCR text from the scanned page"
    return model


@pytest.fixture
def mock_gemini_client(tokyo_json):
    """Mock google-genai client to avoid real API calls."""
    client = MagicMock()
    response = MagicMock()
    response.text = tokyo_json
    client.models.generate_content.return_value = response
    return client


@pytest.fixture
def sample_form():
    """A Form with one item of each type."""
    return Form(
        title="Sample \"Quiz\"",
        description="Line one\nLine two",
        items=[
            FormItem(title="Name", type=ItemType.SHORT_ANSWER, required=True),
            FormItem(
                title="Passage",
                type=ItemType.SECTION_HEADER,
                description="The ___ is blue.\n\nWord Bank: [sky, car]",
            ),
            FormItem(
                title="What is 2+2?",
                type=ItemType.MULTIPLE_CHOICE,
                options=["3", "4", "5"],
                points=1,
                correct_answer="4",
                required=True,
            ),
            FormItem(
                title="Which are continents?",
                type=ItemType.CHECKBOXES,
                options=["Asia", "Pacific", "Africa"],
                points=2,
                correct_answer=["Asia", "Africa"],
                required=True,
            ),
            FormItem(
                title="Blank #1: 'The ___ is blue.'",
                type=ItemType.DROPDOWN,
                options=["sky", "car"],
                points=1,
                correct_answer="sky",
                required=True,
            ),
            FormItem(title="What did you think?", type=ItemType.PARAGRAPH),
        ],
    )


@pytest.fixture
def graded_short_answer_form():
    return Form(
        title="Short answers",
        description="Free text",
        items=[
            FormItem(
                title="Capital of France?",
                type=ItemType.SHORT_ANSWER,
                points=1,
                correct_answer="Paris",
                required=True,
            ),
            FormItem(title="Solve for x", type=ItemType.SHORT_ANSWER, points=1, required=True),
        ],
    )
