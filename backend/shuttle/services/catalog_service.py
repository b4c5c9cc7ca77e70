"""
Route and station catalog.

Routes come from the `routes` table (seeded with the built-in schedule on
first start) and are merged with `route_details` by route id, with the
detail row winning for license plate and driver phone. The merged list is
cached in Redis; every catalog write invalidates it.

Reads degrade to the built-in data when the database is unreachable.
"""

from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.catalog.defaults import ROUTES_DATA, STATIONS_DATA
from shuttle.catalog.partitions import partition_of
from shuttle.core.exceptions import NotFound, PersistenceFailure
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_store_failure
from shuttle.models.route import Route, RouteDetail
from shuttle.models.station import Station
from shuttle.schemas.route import RouteOption, RouteUpsert, RouteDetailsUpdate
from shuttle.schemas.station import StationOut, StationUpsert
from shuttle.services.cache_service import get_cached_routes, set_cached_routes, invalidate_route_cache
from shuttle.services.local_store import local_settings

logger = get_logger(__name__)

DETAILS_KEY = "route_details"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def merge_route(route: RouteOption, detail: Optional[dict]) -> RouteOption:
    """Layer vehicle details over a schedule route. Missing values become None."""
    detail = detail or {}
    return route.model_copy(update={
        "license_plate": _blank_to_none(detail.get("license_plate")),
        "driver_phone": _blank_to_none(detail.get("driver_phone")),
    })


async def _schedule_routes(db: AsyncSession) -> list[RouteOption]:
    result = await db.execute(select(Route).order_by(Route.time.asc(), Route.id.asc()))
    rows = list(result.scalars().all())
    if not rows:
        return list(ROUTES_DATA)
    return [RouteOption.model_validate(r) for r in rows]


async def _vehicle_details(db: AsyncSession) -> dict[str, dict]:
    result = await db.execute(select(RouteDetail))
    return {
        d.route_id: {"license_plate": d.license_plate, "driver_phone": d.driver_phone}
        for d in result.scalars().all()
    }


async def get_routes(db: AsyncSession, use_cache: bool = True) -> tuple[list[RouteOption], bool]:
    """Merged route list. Returns (routes, served_from_cache)."""
    if use_cache:
        cached = await get_cached_routes()
        if cached:
            return [RouteOption.model_validate(r) for r in cached], True

    try:
        schedule = await _schedule_routes(db)
        details = await _vehicle_details(db)
    except SQLAlchemyError as e:
        logger.error("store_read_failed", operation="get_routes", error=str(e))
        record_store_failure("get_routes")
        await db.rollback()
        details = local_settings.get(DETAILS_KEY, {})
        return [merge_route(r, details.get(r.id)) for r in ROUTES_DATA], False

    routes = [merge_route(r, details.get(r.id)) for r in schedule]
    await set_cached_routes([r.model_dump() for r in routes])
    return routes, False


async def get_route(db: AsyncSession, route_id: str) -> RouteOption:
    routes, _ = await get_routes(db)
    for route in routes:
        if route.id == route_id:
            return route
    raise NotFound(f"Route {route_id} not found", route_id=route_id)


async def save_route_details(db: AsyncSession, updates: list[RouteDetailsUpdate]) -> bool:
    """
    Upsert license plate / driver phone per route id. An empty or missing
    value clears the field. Falls back to the in-process store when the
    database write fails.
    """
    known = {r.id for r in (await get_routes(db, use_cache=False))[0]}
    unknown = [u.route_id for u in updates if u.route_id not in known]
    if unknown:
        raise NotFound(f"Unknown route ids: {', '.join(unknown)}", route_ids=unknown)

    try:
        for update in updates:
            detail = await db.get(RouteDetail, update.route_id)
            if detail is None:
                detail = RouteDetail(route_id=update.route_id)
                db.add(detail)
            detail.license_plate = _blank_to_none(update.license_plate)
            detail.driver_phone = _blank_to_none(update.driver_phone)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="save_route_details", error=str(e))
        record_store_failure("save_route_details")
        await db.rollback()
        fallback = dict(local_settings.get(DETAILS_KEY, {}))
        for update in updates:
            fallback[update.route_id] = {
                "license_plate": update.license_plate,
                "driver_phone": update.driver_phone,
            }
        local_settings.set(DETAILS_KEY, fallback)
        return False
    finally:
        await invalidate_route_cache()

    logger.info("route_details_saved", routes=[u.route_id for u in updates])
    return True


async def save_route(db: AsyncSession, route_id: str, data: RouteUpsert) -> RouteOption:
    """Create or update a schedule route."""
    partition_of(data.shift, data.direction)

    try:
        route = await db.get(Route, route_id)
        created = route is None
        if created:
            route = Route(id=route_id)
            db.add(route)
        for field, value in data.model_dump().items():
            setattr(route, field, value)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="save_route", route_id=route_id, error=str(e))
        record_store_failure("save_route")
        await db.rollback()
        raise PersistenceFailure("Could not save route") from e

    await invalidate_route_cache()
    logger.info("route_saved", route_id=route_id, created=created)
    return RouteOption.model_validate(route)


async def delete_route(db: AsyncSession, route_id: str) -> None:
    """Remove a schedule route and its vehicle details."""
    try:
        route = await db.get(Route, route_id)
        if route is None:
            raise NotFound(f"Route {route_id} not found", route_id=route_id)
        await db.execute(delete(RouteDetail).where(RouteDetail.route_id == route_id))
        await db.delete(route)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="delete_route", route_id=route_id, error=str(e))
        record_store_failure("delete_route")
        await db.rollback()
        raise PersistenceFailure("Could not delete route") from e

    await invalidate_route_cache()
    logger.info("route_deleted", route_id=route_id)


async def get_stations(db: AsyncSession) -> list[StationOut]:
    try:
        result = await db.execute(select(Station).order_by(Station.name.asc()))
        rows = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("store_read_failed", operation="get_stations", error=str(e))
        record_store_failure("get_stations")
        await db.rollback()
        return list(STATIONS_DATA)

    if not rows:
        return list(STATIONS_DATA)
    return [StationOut.model_validate(s) for s in rows]


async def get_station(db: AsyncSession, station_id: str) -> StationOut:
    for station in await get_stations(db):
        if station.id == station_id:
            return station
    raise NotFound(f"Station {station_id} not found", station_id=station_id)


async def save_station(db: AsyncSession, station_id: str, data: StationUpsert) -> StationOut:
    try:
        station = await db.get(Station, station_id)
        if station is None:
            station = Station(id=station_id)
            db.add(station)
        for field, value in data.model_dump().items():
            setattr(station, field, value)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="save_station", station_id=station_id, error=str(e))
        record_store_failure("save_station")
        await db.rollback()
        raise PersistenceFailure("Could not save station") from e

    logger.info("station_saved", station_id=station_id)
    return StationOut.model_validate(station)


async def delete_station(db: AsyncSession, station_id: str) -> None:
    try:
        station = await db.get(Station, station_id)
        if station is None:
            raise NotFound(f"Station {station_id} not found", station_id=station_id)
        await db.delete(station)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="delete_station", station_id=station_id, error=str(e))
        record_store_failure("delete_station")
        await db.rollback()
        raise PersistenceFailure("Could not delete station") from e

    logger.info("station_deleted", station_id=station_id)


async def seed_catalog(db: AsyncSession) -> None:
    """Copy the built-in schedule and stations into empty tables."""
    if (await db.execute(select(Route.id).limit(1))).first() is None:
        for route in ROUTES_DATA:
            db.add(Route(**route.model_dump(exclude={"license_plate", "driver_phone"})))
        logger.info("routes_seeded", count=len(ROUTES_DATA))

    if (await db.execute(select(Station.id).limit(1))).first() is None:
        for station in STATIONS_DATA:
            db.add(Station(**station.model_dump()))
        logger.info("stations_seeded", count=len(STATIONS_DATA))

    await db.commit()
