"""
Tests for admin poll management and results.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from services.audience_filter import Viewer
from services.poll_aggregator import ResponseRecord

NEW_POLL = {
    "title": "  Budget priorities  ",
    "target_filters": {"states": ["Lagos"]},
    "questions": [
        {"question_text": "Fund roads or schools?", "options": ["Roads", " ", "Schools"]},
        {"question_text": "Should the budget be published?", "question_type": "yes_no"},
    ],
}


@pytest.mark.unit
class TestAdminPollAccess:
    async def test_regular_user_forbidden(self, client: AsyncClient, override_db, as_user) -> None:
        response = await client.get("/api/v1/admin/polls")
        assert response.status_code == 403

    async def test_anonymous_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/admin/polls")
        assert response.status_code in [401, 403]


@pytest.mark.unit
class TestAdminPollCrud:
    async def test_list_includes_respondent_counts(
        self, client: AsyncClient, override_db, as_admin, poll_factory
    ) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_all_polls = AsyncMock(return_value=([poll_factory(target_filters={"genders": ["Male"]})], 1))
            repo.count_respondents = AsyncMock(return_value=12)

            response = await client.get("/api/v1/admin/polls")

        data = response.json()
        assert response.status_code == 200
        assert data["total"] == 1
        assert data["polls"][0]["total_responses"] == 12
        assert data["polls"][0]["target_filters"]["genders"] == ["Male"]

    async def test_create_normalises_questions(
        self, client: AsyncClient, override_db, as_admin, poll_factory
    ) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo_cls.return_value.create = AsyncMock(return_value=poll_factory())
            response = await client.post("/api/v1/admin/polls", json=NEW_POLL)

        assert response.status_code == 201
        created = repo_cls.return_value.create.call_args.args[0]
        assert created.title == "Budget priorities"
        assert created.questions[0].options == ["Roads", "Schools"]
        assert created.questions[1].options == ["Yes", "No"]

    async def test_create_rejects_single_option(self, client: AsyncClient, override_db, as_admin) -> None:
        payload = {"title": "Poll", "questions": [{"question_text": "Q?", "options": ["Only", ""]}]}
        response = await client.post("/api/v1/admin/polls", json=payload)
        assert response.status_code == 422

    async def test_update_questions_refused_after_responses(
        self, client: AsyncClient, override_db, as_admin, poll_factory
    ) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.count_respondents = AsyncMock(return_value=3)
            repo.update = AsyncMock()

            response = await client.patch(
                "/api/v1/admin/polls/poll-1",
                json={"questions": [{"question_text": "New?", "question_type": "yes_no"}]},
            )

        assert response.status_code == 400
        repo.update.assert_not_called()

    async def test_update_title_allowed_after_responses(
        self, client: AsyncClient, override_db, as_admin, poll_factory
    ) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.count_respondents = AsyncMock(return_value=3)
            repo.update = AsyncMock(return_value=poll_factory(title="Renamed"))

            response = await client.patch("/api/v1/admin/polls/poll-1", json={"title": "Renamed"})

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        assert response.json()["total_responses"] == 3

    async def test_blank_title_update_rejected(self, client: AsyncClient, override_db, as_admin) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo_cls.return_value.update = AsyncMock()
            response = await client.patch("/api/v1/admin/polls/poll-1", json={"title": "     "})

        assert response.status_code == 422
        repo_cls.return_value.update.assert_not_called()

    async def test_empty_update_rejected(self, client: AsyncClient, override_db, as_admin, poll_factory) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=poll_factory())
            response = await client.patch("/api/v1/admin/polls/poll-1", json={})

        assert response.status_code == 400

    async def test_delete_missing_poll(self, client: AsyncClient, override_db, as_admin) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo_cls.return_value.delete_poll = AsyncMock(return_value=False)
            response = await client.delete("/api/v1/admin/polls/nope")

        assert response.status_code == 404


@pytest.mark.unit
class TestAdminPollResults:
    async def test_results_with_breakdown(self, client: AsyncClient, override_db, as_admin, poll_factory) -> None:
        responses = [
            ResponseRecord(respondent_id="u1", question_id="q-1", option_id="opt-a"),
            ResponseRecord(respondent_id="u2", question_id="q-1", option_id="opt-b"),
            ResponseRecord(respondent_id="u3", question_id="q-1", option_id="opt-b"),
        ]
        respondents = {
            "u1": Viewer(state="Lagos", gender="Female"),
            "u2": Viewer(state="Lagos", gender="Male"),
            "u3": Viewer(state="Kano"),
        }
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.get_response_records = AsyncMock(return_value=responses)
            repo.get_respondent_profiles = AsyncMock(return_value=respondents)

            response = await client.get(
                "/api/v1/admin/polls/poll-1/results",
                params=[("breakdown", "gender"), ("breakdown", "state")],
            )

        assert response.status_code == 200
        data = response.json()
        assert data["total_responses"] == 3
        assert data["is_empty"] is False
        question = data["questions"][0]
        assert question["winner_option_id"] == "opt-b"
        assert [o["percentage"] for o in question["options"]] == [33.33, 66.67]
        assert data["demographics"]["gender"] == {"Female": 1, "Male": 1, "Unknown": 1}
        assert data["demographics"]["state"] == {"Lagos": 2, "Kano": 1}

    async def test_results_for_poll_without_responses(
        self, client: AsyncClient, override_db, as_admin, poll_factory
    ) -> None:
        with patch("api.v1.admin_polls.PollRepository") as repo_cls:
            repo = repo_cls.return_value
            repo.get_by_id = AsyncMock(return_value=poll_factory())
            repo.get_response_records = AsyncMock(return_value=[])
            repo.get_respondent_profiles = AsyncMock(return_value={})

            response = await client.get("/api/v1/admin/polls/poll-1/results")

        data = response.json()
        assert data["is_empty"] is True
        assert data["questions"][0]["winner_option_id"] is None
        assert all(o["percentage"] == 0.0 for o in data["questions"][0]["options"])
