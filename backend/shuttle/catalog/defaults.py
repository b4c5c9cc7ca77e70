"""
Built-in schedule and station list, used whenever the routes / stations
tables are empty.

Route ids keep the legacy prefixes (m, mn, mo, n, nn, no) for continuity with
printed timetables, but nothing reads meaning out of them: shift, direction
and overtime are explicit fields.
"""

from shuttle.schemas.route import RouteOption
from shuttle.schemas.station import StationOut

_LINES = (
    ("saraburi", "Saraburi"),
    ("ayutthaya", "Ayutthaya"),
    ("lopburi", "Lopburi"),
)

# prefix, shift, direction, overtime, departure, label
_SLOTS = (
    ("m", "morning", "inbound", False, "06:30", "Morning"),
    ("mn", "evening", "outbound", False, "17:30", "Evening"),
    ("mo", "evening", "outbound", True, "20:30", "Evening OT"),
    ("n", "night", "inbound", False, "18:30", "Night"),
    ("nn", "night", "outbound", False, "05:30", "Night return"),
    ("no", "night", "outbound", True, "08:30", "Night OT"),
)


def _build_routes() -> list[RouteOption]:
    routes = []
    for prefix, shift, direction, overtime, departure, label in _SLOTS:
        for index, (_, line) in enumerate(_LINES, start=1):
            routes.append(
                RouteOption(
                    id=f"{prefix}{index}",
                    name=f"{line} {label}",
                    time=departure,
                    shift=shift,
                    direction=direction,
                    overtime=overtime,
                    max_seats=40,
                )
            )
    return routes


ROUTES_DATA: list[RouteOption] = _build_routes()

STATIONS_DATA: list[StationOut] = [
    StationOut(id="s1", name="Saraburi Bus Terminal", lat=14.5289, lng=100.9101,
               description="In front of the terminal, platform 2"),
    StationOut(id="s2", name="Nong Khae Market", lat=14.3358, lng=100.8730,
               description="Opposite 7-Eleven"),
    StationOut(id="s3", name="Ayutthaya Railway Station", lat=14.3563, lng=100.5846,
               description="Main entrance car park"),
    StationOut(id="s4", name="Wang Noi Junction", lat=14.2245, lng=100.7197,
               description="Under the pedestrian bridge"),
    StationOut(id="s5", name="Lopburi Clock Tower", lat=14.7995, lng=100.6534,
               description=""),
    StationOut(id="s6", name="Hin Kong Plant Gate", lat=14.4530, lng=100.8840,
               description="Security post, gate 1"),
]
