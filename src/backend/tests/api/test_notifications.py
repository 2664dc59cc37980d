"""
Tests for notification endpoints.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient


def _notification(notification_id: str, target_filters=None):
    from models.notification import Notification

    return Notification(
        id=notification_id,
        title="Site Notification",
        message=f"Message {notification_id}",
        notification_type="info",
        show_banner=True,
        is_active=True,
        target_filters=target_filters,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


@pytest.mark.unit
class TestPublicNotifications:
    async def test_anonymous_sees_untargeted_only(self, client: AsyncClient, override_db, anonymous) -> None:
        items = [_notification("n1"), _notification("n2", {"genders": ["Female"]})]
        with patch("api.v1.notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.list_active = AsyncMock(return_value=items)
            response = await client.get("/api/v1/notifications")

        assert response.status_code == 200
        assert [n["id"] for n in response.json()] == ["n1"]

    async def test_user_sees_matching_targeted(self, client: AsyncClient, override_db, as_user) -> None:
        items = [
            _notification("n1", {"constituencies": ["Lagos Island I"]}),
            _notification("n2", {"constituencies": ["Ikeja"]}),
            _notification("n3", {"age_min": 18, "age_max": 40}),
        ]
        with patch("api.v1.notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.list_active = AsyncMock(return_value=items)
            response = await client.get("/api/v1/notifications")

        ids = [n["id"] for n in response.json()]
        assert "n1" in ids
        assert "n2" not in ids
        assert "target_filters" not in response.json()[0]


@pytest.mark.unit
class TestAdminNotifications:
    async def test_requires_admin(self, client: AsyncClient, override_db, as_user) -> None:
        response = await client.get("/api/v1/admin/notifications")
        assert response.status_code == 403

    async def test_create(self, client: AsyncClient, override_db, as_admin) -> None:
        with patch("api.v1.admin_notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.create = AsyncMock(return_value=_notification("n1", {"states": ["Lagos"]}))
            response = await client.post(
                "/api/v1/admin/notifications",
                json={"message": "Hello Lagos", "target_filters": {"states": ["Lagos"]}},
            )

        assert response.status_code == 201
        assert response.json()["target_filters"]["states"] == ["Lagos"]

    async def test_create_rejects_blank_message(self, client: AsyncClient, override_db, as_admin) -> None:
        response = await client.post("/api/v1/admin/notifications", json={"message": "  "})
        assert response.status_code == 422

    async def test_update_checks_window_against_stored_times(
        self, client: AsyncClient, override_db, as_admin
    ) -> None:
        stored = _notification("n1")
        stored.start_time = datetime.now(timezone.utc) + timedelta(days=2)
        with patch("api.v1.admin_notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=stored)
            repo_cls.return_value.update = AsyncMock()
            response = await client.patch(
                "/api/v1/admin/notifications/n1",
                json={"end_time": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()},
            )

        assert response.status_code == 422
        repo_cls.return_value.update.assert_not_called()

    async def test_update_missing_is_404(self, client: AsyncClient, override_db, as_admin) -> None:
        with patch("api.v1.admin_notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=None)
            response = await client.patch("/api/v1/admin/notifications/nope", json={"title": "x"})

        assert response.status_code == 404

    async def test_delete_and_deactivate(self, client: AsyncClient, override_db, as_admin) -> None:
        with patch("api.v1.admin_notifications.NotificationRepository") as repo_cls:
            repo_cls.return_value.delete = AsyncMock(return_value=True)
            repo_cls.return_value.deactivate = AsyncMock(return_value=False)

            deleted = await client.delete("/api/v1/admin/notifications/n1")
            deactivated = await client.post("/api/v1/admin/notifications/n2/deactivate")

        assert deleted.status_code == 204
        assert deactivated.status_code == 404
