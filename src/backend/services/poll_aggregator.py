"""
Poll results aggregation.

Turns stored responses into per-question vote counts, percentages and a
winning option, plus demographic breakdowns of the respondents.
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from services.audience_filter import Viewer

UNKNOWN = "Unknown"

# (label, min age, max age) - inclusive bounds
AGE_GROUPS: tuple[tuple[str, int, int], ...] = (
    ("Under 18", 0, 17),
    ("18-24", 18, 24),
    ("25-34", 25, 34),
    ("35-44", 35, 44),
    ("45-54", 45, 54),
    ("55-64", 55, 64),
    ("65+", 65, 200),
)

BREAKDOWN_ATTRIBUTES = ("gender", "state", "constituency", "age_group")


@dataclass(frozen=True)
class OptionData:
    id: str
    text: str


@dataclass(frozen=True)
class QuestionData:
    id: str
    text: str
    options: tuple[OptionData, ...]


@dataclass(frozen=True)
class PollData:
    """Poll structure the aggregator works on, detached from the ORM."""

    id: str
    title: str
    questions: tuple[QuestionData, ...]

    @classmethod
    def from_model(cls, poll: Any) -> "PollData":
        """Build from a Poll model with questions and options loaded."""
        return cls(
            id=str(poll.id),
            title=poll.title,
            questions=tuple(
                QuestionData(
                    id=str(q.id),
                    text=q.question_text,
                    options=tuple(
                        OptionData(id=str(o.id), text=o.option_text)
                        for o in sorted(q.options, key=lambda o: o.position)
                    ),
                )
                for q in sorted(poll.questions, key=lambda q: q.position)
            ),
        )


@dataclass(frozen=True)
class ResponseRecord:
    """One respondent's chosen option for one question."""

    respondent_id: str
    question_id: str
    option_id: str


@dataclass
class OptionResult:
    option_id: str
    text: str
    vote_count: int = 0
    percentage: float = 0.0
    is_winner: bool = False


@dataclass
class QuestionResult:
    question_id: str
    text: str
    total_votes: int = 0
    options: list[OptionResult] = field(default_factory=list)
    winner_option_id: Optional[str] = None


@dataclass
class PollResult:
    """Aggregated results for a poll."""

    poll_id: str
    title: str
    total_responses: int
    questions: list[QuestionResult]
    # attribute -> {value: distinct respondents}
    demographics: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.total_responses == 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["is_empty"] = self.is_empty
        return data


def age_group(age: int | None) -> str:
    """Bucket an age into a reporting group."""
    if age is None:
        return UNKNOWN
    for label, low, high in AGE_GROUPS:
        if low <= age <= high:
            return label
    return UNKNOWN


def _attribute_value(viewer: Viewer | None, attribute: str, today: date | None) -> str:
    if viewer is None:
        return UNKNOWN
    if attribute == "age_group":
        return age_group(viewer.age(today))
    value = getattr(viewer, attribute, None)
    return value if value else UNKNOWN


def _pick_winner(options: Sequence[OptionResult]) -> OptionResult | None:
    # Strict comparison keeps the earliest listed option on ties
    winner: OptionResult | None = None
    for option in options:
        if option.vote_count > 0 and (winner is None or option.vote_count > winner.vote_count):
            winner = option
    return winner


def aggregate(
    poll: PollData,
    responses: Iterable[ResponseRecord],
    respondents: Mapping[str, Viewer] | None = None,
    breakdown_by: Sequence[str] = ("gender",),
    today: date | None = None,
) -> PollResult:
    """
    Aggregate responses for a poll.

    Responses that name a question or option outside the poll are ignored.
    Each respondent is counted once in the demographic breakdown no matter
    how many questions they answered. Respondents without a profile entry
    (or without the attribute) are reported as "Unknown".
    """
    valid_options = {q.id: {o.id for o in q.options} for q in poll.questions}

    counts: Counter[tuple[str, str]] = Counter()
    respondent_ids: set[str] = set()
    for response in responses:
        allowed = valid_options.get(response.question_id)
        if allowed is None or response.option_id not in allowed:
            continue
        counts[(response.question_id, response.option_id)] += 1
        respondent_ids.add(response.respondent_id)

    questions: list[QuestionResult] = []
    for question in poll.questions:
        option_results = [
            OptionResult(option_id=o.id, text=o.text, vote_count=counts[(question.id, o.id)])
            for o in question.options
        ]
        total = sum(o.vote_count for o in option_results)
        for option in option_results:
            option.percentage = (option.vote_count / total * 100) if total > 0 else 0.0

        winner = _pick_winner(option_results)
        if winner is not None:
            winner.is_winner = True

        questions.append(
            QuestionResult(
                question_id=question.id,
                text=question.text,
                total_votes=total,
                options=option_results,
                winner_option_id=winner.option_id if winner else None,
            )
        )

    respondents = respondents or {}
    demographics: dict[str, dict[str, int]] = {}
    for attribute in breakdown_by:
        groups = Counter(
            _attribute_value(respondents.get(rid), attribute, today) for rid in respondent_ids
        )
        demographics[attribute] = dict(sorted(groups.items(), key=lambda item: (-item[1], item[0])))

    return PollResult(
        poll_id=poll.id,
        title=poll.title,
        total_responses=len(respondent_ids),
        questions=questions,
        demographics=demographics,
    )
