"""
Tests for public poll endpoints.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError


@pytest.mark.unit
class TestPollListing:
    """Visibility of polls to different viewers."""

    async def test_anonymous_sees_only_untargeted(
        self, client: AsyncClient, override_db, anonymous, poll_factory
    ) -> None:
        polls = [
            poll_factory(poll_id="open", target_filters=None),
            poll_factory(poll_id="lagos-only", target_filters={"states": ["Lagos"]}),
        ]
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.list_open_polls = AsyncMock(return_value=polls)
            response = await client.get("/api/v1/polls")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["open"]

    async def test_matching_user_sees_targeted(
        self, client: AsyncClient, override_db, as_user, poll_factory
    ) -> None:
        polls = [
            poll_factory(poll_id="lagos-women", target_filters={"states": ["Lagos"], "genders": ["Female"]}),
            poll_factory(poll_id="kano", target_filters={"states": ["Kano"]}),
            poll_factory(poll_id="over-60", target_filters={"age_min": 60}),
        ]
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.list_open_polls = AsyncMock(return_value=polls)
            response = await client.get("/api/v1/polls")

        assert [p["id"] for p in response.json()] == ["lagos-women"]
        assert "target_filters" not in response.json()[0]

    async def test_hidden_poll_is_404(self, client: AsyncClient, override_db, as_user, poll_factory) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(
                return_value=poll_factory(target_filters={"states": ["Kano"]})
            )
            response = await client.get("/api/v1/polls/poll-1")

        assert response.status_code == 404

    async def test_expired_poll_is_404(self, client: AsyncClient, override_db, as_user, poll_factory) -> None:
        expired = poll_factory(active_until=datetime.now(timezone.utc) - timedelta(hours=1))
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=expired)
            response = await client.get("/api/v1/polls/poll-1")

        assert response.status_code == 404


@pytest.mark.unit
class TestPollResponses:
    """Submitting answers."""

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/polls/poll-1/responses",
            json={"answers": [{"question_id": "q-1", "option_id": "opt-a"}]},
        )
        assert response.status_code in [401, 403]

    async def test_submit_records_answers(self, client: AsyncClient, override_db, as_user, poll_factory) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.get_answered_question_ids = AsyncMock(return_value=[])
            repo.record_responses = AsyncMock(return_value=1)

            response = await client.post(
                "/api/v1/polls/poll-1/responses",
                json={"answers": [{"question_id": "q-1", "option_id": "opt-b"}]},
            )

        assert response.status_code == 201
        assert response.json() == {"poll_id": "poll-1", "has_responded": True, "answered_question_ids": ["q-1"]}
        repo.record_responses.assert_awaited_once_with("poll-1", as_user.id, [("q-1", "opt-b")])

    async def test_duplicate_is_409(self, client: AsyncClient, override_db, as_user, poll_factory) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.get_answered_question_ids = AsyncMock(return_value=["q-1"])
            repo.record_responses = AsyncMock()

            response = await client.post(
                "/api/v1/polls/poll-1/responses",
                json={"answers": [{"question_id": "q-1", "option_id": "opt-a"}]},
            )

        assert response.status_code == 409
        repo.record_responses.assert_not_called()

    async def test_concurrent_duplicate_is_409(self, client: AsyncClient, override_db, as_user, poll_factory) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.get_answered_question_ids = AsyncMock(return_value=[])
            repo.record_responses = AsyncMock(side_effect=IntegrityError("insert", {}, Exception("unique")))

            response = await client.post(
                "/api/v1/polls/poll-1/responses",
                json={"answers": [{"question_id": "q-1", "option_id": "opt-a"}]},
            )

        assert response.status_code == 409

    async def test_option_from_other_question_rejected(
        self, client: AsyncClient, override_db, as_user, poll_factory
    ) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=poll_factory())

            response = await client.post(
                "/api/v1/polls/poll-1/responses",
                json={"answers": [{"question_id": "q-1", "option_id": "opt-z"}]},
            )

        assert response.status_code == 400

    async def test_status_reports_answered_questions(
        self, client: AsyncClient, override_db, as_user, poll_factory
    ) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=poll_factory())
            repo_cls.return_value.get_answered_question_ids = AsyncMock(return_value=["q-1"])

            response = await client.get("/api/v1/polls/poll-1/status")

        assert response.json()["has_responded"] is True

    async def test_status_of_hidden_poll_is_404(
        self, client: AsyncClient, override_db, as_user, poll_factory
    ) -> None:
        with patch("api.v1.polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(
                return_value=poll_factory(target_filters={"genders": ["Male"]})
            )
            repo_cls.return_value.get_answered_question_ids = AsyncMock(return_value=[])

            response = await client.get("/api/v1/polls/poll-1/status")

        assert response.status_code == 404
        repo_cls.return_value.get_answered_question_ids.assert_not_called()
