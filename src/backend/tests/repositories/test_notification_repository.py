"""
Tests for notification repository.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.mark.unit
class TestNotificationRepository:
    async def test_create_stores_target_filters(self, mock_session) -> None:
        from repositories.notification_repository import NotificationRepository
        from schemas.notification import NotificationCreate

        data = NotificationCreate(
            message="Voter registration closes soon",
            notification_type="alert",
            target_filters={"states": ["Kano"], "age_min": 18},
        )

        notification = await NotificationRepository(mock_session).create(data)

        mock_session.add.assert_called_once_with(notification)
        assert notification.notification_type == "alert"
        assert notification.target_filters["states"] == ["Kano"]
        assert notification.title == "Site Notification"

    async def test_update_applies_only_sent_fields(self, mock_session) -> None:
        from models.notification import Notification
        from repositories.notification_repository import NotificationRepository
        from schemas.notification import NotificationUpdate

        notification = Notification(
            id="n1",
            title="Old",
            message="Keep me",
            is_active=True,
            target_filters={"states": ["Kano"]},
        )
        data = NotificationUpdate.model_validate({"title": "New", "target_filters": None, "message": None})

        await NotificationRepository(mock_session).update(notification, data)

        assert notification.title == "New"
        assert notification.message == "Keep me"
        assert notification.target_filters is None
        assert notification.updated_at is not None

    async def test_list_active_returns_models(self, mock_session) -> None:
        from repositories.notification_repository import NotificationRepository

        items = [MagicMock(), MagicMock()]
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = items
        mock_session.execute = AsyncMock(return_value=mock_result)

        result = await NotificationRepository(mock_session).list_active(datetime(2025, 1, 1, tzinfo=timezone.utc))

        assert result == items

    async def test_deactivate_missing(self, mock_session) -> None:
        from repositories.notification_repository import NotificationRepository

        mock_session.execute = AsyncMock(return_value=MagicMock(rowcount=0))

        assert await NotificationRepository(mock_session).deactivate("nope") is False
