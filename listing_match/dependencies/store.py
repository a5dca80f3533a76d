from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from listing_match.database import get_session
from listing_match.services.store import PropertyStore


def get_store(db: AsyncSession = Depends(get_session)) -> PropertyStore:
    return PropertyStore(db)
