"""Trip lookup endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from grouptrips.core.security import get_current_actor
from grouptrips.infrastructure.database.repositories import SqlTripRepository
from grouptrips.interfaces.http.deps import get_db_session
from grouptrips.schemas import TokenData, TripResponse

router = APIRouter()


@router.get("/by-code/{join_code}", response_model=TripResponse, summary="Look up a trip by its join code")
async def get_trip_by_code(
    join_code: str,
    _: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> TripResponse:
    trip = await SqlTripRepository(db).get_by_join_code(join_code)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return TripResponse.model_validate(trip)
