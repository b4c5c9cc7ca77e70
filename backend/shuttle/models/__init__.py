from shuttle.models.user import User
from shuttle.models.route import Route, RouteDetail
from shuttle.models.station import Station
from shuttle.models.booking import Booking, BookingStatus
from shuttle.models.news import News

__all__ = ["User", "Route", "RouteDetail", "Station", "Booking", "BookingStatus", "News"]
