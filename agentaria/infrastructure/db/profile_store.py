# agentaria/infrastructure/db/profile_store.py
"""
Record-store adapter used by the onboarding wizard.

A wizard run outlives the HTTP request that started it, so every operation
opens its own short-lived DB session instead of borrowing the request's.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from agentaria.domain.models.onboarding import Identity, SubscriberProfile
from agentaria.infrastructure.db.repositories import SubscriberRepository

logger = logging.getLogger("profile_store")


class SubscriberProfileStore:
    def __init__(self, session_factory: Callable[[], AsyncSession] | None = None):
        if session_factory is None:
            from agentaria.core.db import AsyncSessionLocal

            session_factory = AsyncSessionLocal
        self._session_factory = session_factory

    async def get_profile(self, identity: Identity) -> SubscriberProfile:
        async with self._session_factory() as db:
            record = await SubscriberRepository(db).get_by_id(identity.user_id)

        if record is None:
            logger.info("No subscriber details for %s, using defaults", identity.user_id)
            return SubscriberProfile.from_record(None, None, None, identity.email)

        return SubscriberProfile.from_record(
            record.subscriber_name,
            record.business_name,
            record.service_number,
            identity.email,
        )

    async def mark_onboarded(self, user_id: str) -> bool:
        async with self._session_factory() as db:
            updated = await SubscriberRepository(db).mark_onboarded(user_id)
        if not updated:
            logger.warning("Onboarding flag not written: no subscriber row for %s", user_id)
        return updated
