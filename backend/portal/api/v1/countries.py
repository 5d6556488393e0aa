"""Country lookup endpoint (public)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.api.deps import get_db_session
from portal.repositories.country_repo import CountryRepository
from portal.schemas.country import CountryListResponse, CountryResponse
from portal.services.ordering import sort_countries


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/countries", response_model=CountryListResponse)
async def list_countries(db: Session = Depends(get_db_session)) -> CountryListResponse:
    """German-speaking countries first, then the rest alphabetically."""
    try:
        countries = await CountryRepository(db).list_countries()
    except SQLAlchemyError as e:
        logger.exception("Error fetching countries")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Laden der Länder",
        ) from e

    return CountryListResponse(
        countries=[CountryResponse(id=c.id, name=c.name, code=c.code) for c in sort_countries(countries)]
    )
