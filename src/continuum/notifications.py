"""Milestone notification requests and their installation through a dispatcher."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Protocol

from continuum.logging_utils import log_event
from continuum.models import NotificationSettings
from continuum.progress import DayConfig, next_notification_instants
from continuum.storage.preferences import PreferencesStore

LOGGER = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Continuum"


@dataclass(frozen=True, slots=True)
class NotificationRequest:
    identifier: str
    title: str
    body: str
    fire_at: datetime


class NotificationDispatcher(Protocol):
    async def request_permission(self) -> bool: ...

    async def remove_all_pending(self) -> None: ...

    async def add(self, request: NotificationRequest) -> None: ...


class InMemoryDispatcher:
    """Dispatcher that only records what would be delivered."""

    def __init__(self, *, grant_permission: bool = True):
        self.grant_permission = grant_permission
        self.pending: List[NotificationRequest] = []

    async def request_permission(self) -> bool:
        return self.grant_permission

    async def remove_all_pending(self) -> None:
        self.pending.clear()

    async def add(self, request: NotificationRequest) -> None:
        self.pending.append(request)


def build_requests(
    config: DayConfig,
    settings: NotificationSettings,
    now: datetime,
) -> List[NotificationRequest]:
    """Requests to install for ``now``; identifiers are stable per threshold and day."""

    return [
        NotificationRequest(
            identifier=f"continuum-{milestone.threshold}-{milestone.instant.day}",
            title=NOTIFICATION_TITLE,
            body=f"{milestone.threshold}% of your day remaining",
            fire_at=milestone.instant,
        )
        for milestone in next_notification_instants(config, settings, now)
    ]


class NotificationManager:
    def __init__(self, preferences: PreferencesStore, dispatcher: NotificationDispatcher):
        self.preferences = preferences
        self.dispatcher = dispatcher
        self.settings = preferences.notification_settings()

    async def update_settings(self, settings: NotificationSettings, now: datetime) -> List[NotificationRequest]:
        self.settings = settings
        await self.preferences.save_notification_settings(settings)
        log_event(
            {
                "event": "notification_settings_changed",
                "enabled": settings.enabled,
                "thresholds": sorted(settings.thresholds),
            }
        )
        return await self.reschedule(now)

    async def set_enabled(self, enabled: bool, now: datetime) -> bool:
        """Toggle notifications, asking for permission when turning them on.

        A denied permission leaves notifications disabled until the user
        toggles them again.
        """

        if enabled and not await self.dispatcher.request_permission():
            LOGGER.info("Notification permission denied, keeping notifications disabled")
            enabled = False
        await self.update_settings(self.settings.model_copy(update={"enabled": enabled}), now)
        return enabled

    async def set_threshold(self, threshold: int, active: bool, now: datetime) -> List[NotificationRequest]:
        thresholds = set(self.settings.thresholds)
        if active:
            thresholds.add(threshold)
        else:
            thresholds.discard(threshold)
        updated = NotificationSettings(enabled=self.settings.enabled, thresholds=thresholds)
        return await self.update_settings(updated, now)

    async def reschedule(self, now: datetime) -> List[NotificationRequest]:
        """Replace every pending request with the set computed for ``now``."""

        await self.dispatcher.remove_all_pending()
        requests = build_requests(self.preferences.day_config(), self.settings, now)
        installed: List[NotificationRequest] = []
        for request in requests:
            try:
                await self.dispatcher.add(request)
            except Exception:
                LOGGER.exception("Failed to install notification %s", request.identifier)
                continue
            installed.append(request)
        log_event(
            {
                "event": "notifications_rescheduled",
                "identifiers": [request.identifier for request in installed],
            }
        )
        return installed


__all__ = [
    "NOTIFICATION_TITLE",
    "NotificationRequest",
    "NotificationDispatcher",
    "InMemoryDispatcher",
    "build_requests",
    "NotificationManager",
]
