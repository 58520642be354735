"""
Data Schemas for Form Gen
Pydantic models for the generated form, its items and export credentials.
"""
import math
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemType(str, Enum):
    """Supported form item types."""
    SHORT_ANSWER = "SHORT_ANSWER"
    PARAGRAPH = "PARAGRAPH"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CHECKBOXES = "CHECKBOXES"
    DROPDOWN = "DROPDOWN"
    SECTION_HEADER = "SECTION_HEADER"  # Text blocks such as reading passages

    @property
    def is_choice(self) -> bool:
        return self in CHOICE_TYPES


CHOICE_TYPES = frozenset({ItemType.MULTIPLE_CHOICE, ItemType.CHECKBOXES, ItemType.DROPDOWN})


class FormItem(BaseModel):
    """Represents one question or text block within a form."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., description="Question text or section heading")
    type: ItemType = Field(..., description="Item type")
    description: Optional[str] = Field(
        None,
        description="Passage text (SECTION_HEADER only)"
    )
    options: Optional[List[str]] = Field(
        None,
        description="Answer choices (MULTIPLE_CHOICE, CHECKBOXES, DROPDOWN only)"
    )
    points: Optional[int] = Field(None, ge=0, description="Point value of a graded item")
    correct_answer: Optional[Union[str, List[str]]] = Field(
        None,
        alias="correctAnswer",
        description="Correct answer; a list only for CHECKBOXES"
    )
    required: Optional[bool] = Field(None, description="Whether a response is mandatory")

    @field_validator("points", mode="before")
    @classmethod
    def _whole_points(cls, value):
        # Forms point values are whole numbers; a positive fraction still counts as graded
        if isinstance(value, float) and math.isfinite(value) and value > 0:
            return max(1, int(value + 0.5))
        return value

    def answers(self) -> List[str]:
        """Correct answer normalized to a list (empty when none was identified)."""
        if self.correct_answer is None:
            return []
        if isinstance(self.correct_answer, str):
            return [self.correct_answer] if self.correct_answer else []
        return [answer for answer in self.correct_answer if answer]

    @property
    def is_graded(self) -> bool:
        return bool(self.points and self.points > 0)

    @property
    def missing_options(self) -> bool:
        """A choice item with nothing to choose from."""
        return self.type.is_choice and not self.options

    @property
    def has_answer_list_for_single_answer(self) -> bool:
        """A list answer on any type other than CHECKBOXES."""
        return isinstance(self.correct_answer, list) and self.type != ItemType.CHECKBOXES

    def answers_outside_options(self) -> List[str]:
        """Answers that do not match any entry in `options` (choice items only)."""
        if not self.type.is_choice:
            return []
        options = self.options or []
        return [answer for answer in self.answers() if answer not in options]


class Form(BaseModel):
    """Represents a complete generated quiz/survey."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Form title")
    description: str = Field(..., description="Form description")
    items: List[FormItem] = Field(..., description="Ordered form items")

    def to_pretty_json(self) -> str:
        """Clipboard payload: indented JSON using the wire field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class AccessCredential(BaseModel):
    """OAuth access token for the Google Forms API, passed explicitly to the exporter."""
    access_token: str = Field(..., min_length=1, description="Bearer token")
    expires_at: Optional[datetime] = Field(None, description="Token expiry, if known")

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Check the token is present and not expired."""
        if not self.access_token.strip():
            return False
        if self.expires_at is None:
            return True
        if self.expires_at.tzinfo is None:
            return (now or datetime.now()) < self.expires_at
        return (now or datetime.now(timezone.utc)) < self.expires_at


class IngestionResult(BaseModel):
    """Text extracted from an uploaded document plus any non-fatal warnings."""
    text: str = Field(..., description="Extracted document text")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal extraction warnings")
