"""Owner apartment list and public search endpoints."""
from __future__ import annotations

from datetime import date

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..core.config import settings
from ..core.http import get_client
from ..schemas.apartments import ApartmentSearchCriteria
from ..schemas.views import ApartmentListPage, ApartmentSearchPage
from ..services import apartments as apartments_service
from ..services.list_view import SortOrder

router = APIRouter()


@router.get("/owners/{owner_id}/apartments", response_model=ApartmentListPage)
async def owner_apartments(
    owner_id: str,
    search: str = "",
    status_filter: str = Query(default="all", alias="status"),
    price_range: str = "all",
    rooms: str = "all",
    sort: str = "created_at",
    order: SortOrder = SortOrder.DESC,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    client: httpx.AsyncClient = Depends(get_client),
) -> ApartmentListPage:
    """Return one page of the owner's apartments plus dashboard stats."""

    try:
        return await apartments_service.owner_apartments_page(
            client,
            owner_id,
            search=search,
            filters={"status": status_filter, "price_range": price_range, "rooms": rooms},
            sort_field=sort,
            sort_order=order,
            page=page,
            page_size=page_size,
        )
    except KeyError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc.args[0])) from exc


@router.get("/apartments/search", response_model=ApartmentSearchPage)
async def search_apartments(
    min_price: int | None = Query(default=None, ge=0),
    max_price: int | None = Query(default=None, ge=0),
    location: str | None = None,
    university: str | None = None,
    room_type: str | None = None,
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    radius_km: float | None = Query(default=None, gt=0),
    check_in: date | None = None,
    check_out: date | None = None,
    search: str = "",
    price_range: str = "all",
    rooms: str = "all",
    sort: str = "created_at",
    order: SortOrder = SortOrder.DESC,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    client: httpx.AsyncClient = Depends(get_client),
) -> ApartmentSearchPage:
    """Public listing search; the response says which backend query answered it."""

    criteria = ApartmentSearchCriteria(
        min_price=min_price,
        max_price=max_price,
        location=location,
        university=university,
        room_type=room_type,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        check_in=check_in,
        check_out=check_out,
    )
    try:
        return await apartments_service.search_apartments_page(
            client,
            criteria,
            search=search,
            filters={"price_range": price_range, "rooms": rooms},
            sort_field=sort,
            sort_order=order,
            page=page,
            page_size=page_size,
        )
    except KeyError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc.args[0])) from exc
