"""
Tests for poll result aggregation.
"""

import random
from datetime import date

import pytest

from services.audience_filter import Viewer
from services.poll_aggregator import (
    UNKNOWN,
    OptionData,
    PollData,
    QuestionData,
    ResponseRecord,
    age_group,
    aggregate,
)

TODAY = date(2025, 6, 15)


@pytest.fixture
def poll() -> PollData:
    return PollData(
        id="poll-1",
        title="Budget priorities",
        questions=(
            QuestionData(
                id="q1",
                text="Fund first?",
                options=(OptionData("a", "Roads"), OptionData("b", "Schools"), OptionData("c", "Clinics")),
            ),
            QuestionData(
                id="q2",
                text="Support the levy?",
                options=(OptionData("yes", "Yes"), OptionData("no", "No")),
            ),
        ),
    )


def _responses(*rows: tuple[str, str, str]) -> list[ResponseRecord]:
    return [ResponseRecord(respondent_id=r, question_id=q, option_id=o) for r, q, o in rows]


@pytest.mark.unit
class TestAggregate:
    """Test aggregate()."""

    def test_no_responses_is_empty(self, poll) -> None:
        result = aggregate(poll, [])

        assert result.total_responses == 0
        assert result.is_empty is True
        for question in result.questions:
            assert question.total_votes == 0
            assert question.winner_option_id is None
            assert all(o.percentage == 0.0 for o in question.options)
            assert not any(o.is_winner for o in question.options)

    def test_counts_and_percentages(self, poll) -> None:
        responses = _responses(
            ("u1", "q1", "a"),
            ("u2", "q1", "a"),
            ("u3", "q1", "b"),
            ("u4", "q1", "c"),
            ("u1", "q2", "no"),
        )
        result = aggregate(poll, responses)
        q1, q2 = result.questions

        assert q1.total_votes == 4
        assert [o.vote_count for o in q1.options] == [2, 1, 1]
        assert [o.percentage for o in q1.options] == [50.0, 25.0, 25.0]
        assert q1.winner_option_id == "a"
        assert q2.total_votes == 1
        assert q2.winner_option_id == "no"
        assert [o.vote_count for o in q2.options] == [0, 1]

    def test_tie_goes_to_first_listed_option(self, poll) -> None:
        responses = _responses(
            ("u1", "q1", "b"),
            ("u2", "q1", "b"),
            ("u3", "q1", "b"),
            ("u4", "q1", "a"),
            ("u5", "q1", "a"),
            ("u6", "q1", "a"),
        )
        q1 = aggregate(poll, responses).questions[0]

        assert q1.winner_option_id == "a"
        assert [o.is_winner for o in q1.options] == [True, False, False]

    def test_order_of_responses_does_not_matter(self, poll) -> None:
        responses = _responses(
            ("u1", "q1", "a"),
            ("u2", "q1", "b"),
            ("u3", "q1", "b"),
            ("u1", "q2", "yes"),
            ("u2", "q2", "yes"),
            ("u3", "q2", "no"),
        )
        expected = aggregate(poll, responses).to_dict()

        shuffled = list(responses)
        random.Random(7).shuffle(shuffled)
        assert aggregate(poll, shuffled).to_dict() == expected
        assert aggregate(poll, list(reversed(responses))).to_dict() == expected

    def test_unknown_question_or_option_ignored(self, poll) -> None:
        responses = _responses(
            ("u1", "q1", "a"),
            ("u2", "q9", "a"),
            ("u3", "q1", "yes"),
        )
        result = aggregate(poll, responses)

        assert result.total_responses == 1
        assert result.questions[0].total_votes == 1
        assert result.questions[1].total_votes == 0

    def test_respondents_counted_once_in_breakdown(self, poll) -> None:
        responses = _responses(
            ("u1", "q1", "a"),
            ("u1", "q2", "yes"),
            ("u2", "q1", "b"),
            ("u2", "q2", "no"),
            ("u3", "q1", "a"),
        )
        respondents = {
            "u1": Viewer(gender="Female"),
            "u2": Viewer(gender="Female"),
            "u3": Viewer(gender="Male"),
        }
        result = aggregate(poll, responses, respondents=respondents)

        assert result.total_responses == 3
        assert result.demographics == {"gender": {"Female": 2, "Male": 1}}

    def test_missing_profile_reported_as_unknown(self, poll) -> None:
        responses = _responses(("u1", "q1", "a"), ("u2", "q1", "b"))
        result = aggregate(
            poll,
            responses,
            respondents={"u1": Viewer(state="Lagos")},
            breakdown_by=("gender", "state"),
        )

        assert result.demographics["gender"] == {UNKNOWN: 2}
        assert result.demographics["state"] == {"Lagos": 1, UNKNOWN: 1}

    def test_age_group_breakdown(self, poll) -> None:
        responses = _responses(("u1", "q1", "a"), ("u2", "q1", "a"), ("u3", "q1", "a"))
        respondents = {
            "u1": Viewer(birth_date=date(2004, 1, 1)),
            "u2": Viewer(birth_date=date(1950, 1, 1)),
            "u3": Viewer(),
        }
        result = aggregate(poll, responses, respondents=respondents, breakdown_by=("age_group",), today=TODAY)

        assert result.demographics["age_group"] == {"18-24": 1, "65+": 1, UNKNOWN: 1}

    def test_to_dict_includes_empty_flag(self, poll) -> None:
        data = aggregate(poll, []).to_dict()
        assert data["is_empty"] is True
        assert data["questions"][0]["options"][0]["text"] == "Roads"


@pytest.mark.unit
class TestAgeGroup:
    @pytest.mark.parametrize(
        "age, label",
        [(None, UNKNOWN), (12, "Under 18"), (18, "18-24"), (24, "18-24"), (25, "25-34"), (64, "55-64"), (90, "65+")],
    )
    def test_buckets(self, age, label) -> None:
        assert age_group(age) == label


@pytest.mark.unit
class TestPollDataFromModel:
    def test_sorts_by_position(self) -> None:
        from unittest.mock import MagicMock

        options = [
            MagicMock(id="o2", option_text="Second", position=1),
            MagicMock(id="o1", option_text="First", position=0),
        ]
        question = MagicMock(id="q1", question_text="Pick", position=0, options=options)
        model = MagicMock(id="p1", title="Poll", questions=[question])

        data = PollData.from_model(model)

        assert [o.id for o in data.questions[0].options] == ["o1", "o2"]
        assert data.questions[0].text == "Pick"
