from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agentaria.infrastructure.db.models import SubscriberDetails


class SubscriberRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, subscriber_id: str) -> SubscriberDetails | None:
        stmt = select(SubscriberDetails).where(SubscriberDetails.subscriber_id == subscriber_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_onboarded(self, subscriber_id: str) -> bool:
        """Set the completion flag.  Returns False when no row matched."""
        stmt = (
            update(SubscriberDetails)
            .where(SubscriberDetails.subscriber_id == subscriber_id)
            .values(is_onboarded="true", updated_at=func.now())
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return (result.rowcount or 0) > 0
