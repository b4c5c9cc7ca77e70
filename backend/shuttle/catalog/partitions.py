"""
Rider-facing route partitions, keyed on a route's explicit shift and
direction. Every configured route must land in exactly one partition;
`partition_of` raises for combinations the booking flow has no tab for.
"""

import enum
from typing import Iterable

from shuttle.core.exceptions import ValidationError
from shuttle.schemas.route import RouteOption, RoutePartitions


class Partition(str, enum.Enum):
    MORNING_INBOUND = "morning_inbound"
    EVENING_OUTBOUND = "evening_outbound"
    NIGHT_INBOUND = "night_inbound"
    NIGHT_OUTBOUND = "night_outbound"


_BY_SHIFT_DIRECTION = {
    ("morning", "inbound"): Partition.MORNING_INBOUND,
    ("evening", "outbound"): Partition.EVENING_OUTBOUND,
    ("night", "inbound"): Partition.NIGHT_INBOUND,
    ("night", "outbound"): Partition.NIGHT_OUTBOUND,
}


def partition_of(shift: str, direction: str) -> Partition:
    try:
        return _BY_SHIFT_DIRECTION[(shift, direction)]
    except KeyError:
        raise ValidationError(
            f"No booking partition for {shift} {direction} routes",
            shift=shift,
            direction=direction,
        ) from None


def partition_routes(routes: Iterable[RouteOption]) -> RoutePartitions:
    groups: dict[str, list[RouteOption]] = {p.value: [] for p in Partition}
    for route in routes:
        groups[partition_of(route.shift, route.direction).value].append(route)
    for members in groups.values():
        members.sort(key=lambda r: (r.overtime, r.time, r.id))
    return RoutePartitions(**groups)
