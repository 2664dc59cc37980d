"""
Poll-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from schemas.audience import TargetFiltersSchema


class QuestionTypeEnum(str, Enum):
    """Kind of poll question."""

    YES_NO = "yes_no"
    MULTIPLE_CHOICE = "multiple_choice"


YES_NO_OPTIONS = ["Yes", "No"]


class BreakdownAttribute(str, Enum):
    """Respondent attributes results can be broken down by."""

    GENDER = "gender"
    STATE = "state"
    CONSTITUENCY = "constituency"
    AGE_GROUP = "age_group"


class PollQuestionCreate(BaseModel):
    """
    A question in a poll being created.

    Blank options are dropped before validation; yes/no questions always
    get the fixed Yes/No options.
    """

    question_text: str = Field(..., min_length=1, max_length=1000)
    question_type: QuestionTypeEnum = QuestionTypeEnum.MULTIPLE_CHOICE
    options: list[str] = Field(default_factory=list, max_length=20)

    @model_validator(mode="after")
    def normalise_options(self) -> "PollQuestionCreate":
        self.question_text = self.question_text.strip()
        if not self.question_text:
            raise ValueError("Question text is required")
        if self.question_type == QuestionTypeEnum.YES_NO:
            self.options = list(YES_NO_OPTIONS)
        else:
            self.options = [o.strip() for o in self.options if o.strip()]
        if len(self.options) < 2:
            raise ValueError("At least 2 options required")
        return self


class PollCreate(BaseModel):
    """Schema for creating a poll."""

    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=2000)
    is_active: bool = True
    active_until: Optional[datetime] = None
    target_filters: Optional[TargetFiltersSchema] = None
    questions: list[PollQuestionCreate] = Field(..., min_length=1, max_length=50)

    @model_validator(mode="after")
    def strip_title(self) -> "PollCreate":
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Poll title is required")
        return self


class PollUpdate(BaseModel):
    """Partial poll update. Supplying questions replaces them all."""

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None
    active_until: Optional[datetime] = None
    target_filters: Optional[TargetFiltersSchema] = None
    questions: Optional[list[PollQuestionCreate]] = Field(None, min_length=1, max_length=50)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Poll title cannot be empty")
        return v


class PollOption(BaseModel):
    id: str
    option_text: str
    position: int = 0

    model_config = {"from_attributes": True}


class PollQuestion(BaseModel):
    id: str
    question_text: str
    question_type: QuestionTypeEnum = QuestionTypeEnum.MULTIPLE_CHOICE
    position: int = 0
    options: list[PollOption]

    model_config = {"from_attributes": True}


class Poll(BaseModel):
    """Schema for poll responses."""

    id: str
    title: str
    description: Optional[str] = None
    is_active: bool
    active_until: Optional[datetime] = None
    questions: list[PollQuestion]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AdminPoll(Poll):
    """Poll with admin-only fields."""

    target_filters: Optional[TargetFiltersSchema] = None
    total_responses: int = 0


class PollListResponse(BaseModel):
    """Paginated list of polls."""

    polls: list[AdminPoll]
    total: int
    page: int
    per_page: int
    total_pages: int


class PollAnswer(BaseModel):
    question_id: str
    option_id: str


class PollSubmission(BaseModel):
    """A user's answers to a poll, one option per question."""

    answers: list[PollAnswer] = Field(..., min_length=1, max_length=50)

    @model_validator(mode="after")
    def one_answer_per_question(self) -> "PollSubmission":
        question_ids = [a.question_id for a in self.answers]
        if len(question_ids) != len(set(question_ids)):
            raise ValueError("Each question can only be answered once")
        return self


class PollSubmissionStatus(BaseModel):
    poll_id: str
    has_responded: bool
    answered_question_ids: list[str] = []


class OptionResult(BaseModel):
    option_id: str
    text: str
    vote_count: int = 0
    percentage: float = 0.0
    is_winner: bool = False


class QuestionResult(BaseModel):
    question_id: str
    text: str
    total_votes: int = 0
    options: list[OptionResult]
    winner_option_id: Optional[str] = None


class PollResults(BaseModel):
    """Aggregated poll results."""

    poll_id: str
    title: str
    total_responses: int
    is_empty: bool
    questions: list[QuestionResult]
    demographics: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description="Distinct respondents per attribute value",
    )
