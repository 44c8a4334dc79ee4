"""Activity feed: written by every mutating service, read by the dashboard."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.core.config import settings
from tuition.core.enums import ActivityType
from tuition.core.models import Activity

from .schemas import ActivityResponse


def log_activity(
    db: AsyncSession,
    activity_type: ActivityType,
    description: str,
    user: str,
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Stage an activity row on the caller's transaction; committed with the change it describes."""
    db.add(
        Activity(
            type=activity_type.value,
            description=description,
            data=data or {},
            user=user,
        )
    )


async def list_activities(db: AsyncSession, limit: Optional[int] = None) -> List[ActivityResponse]:
    limit = limit or settings.activity_feed_limit
    result = await db.execute(
        select(Activity).order_by(Activity.timestamp.desc()).limit(limit)
    )
    return [ActivityResponse.model_validate(a) for a in result.scalars().all()]
