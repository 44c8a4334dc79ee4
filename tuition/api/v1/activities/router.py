from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.db.session import get_db

from .schemas import ActivityResponse
from . import service

router = APIRouter(
    prefix="/api/v1/activities",
    tags=["activities"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[ActivityResponse])
async def list_activities(db: AsyncSession = Depends(get_db)) -> List[ActivityResponse]:
    return await service.list_activities(db)
