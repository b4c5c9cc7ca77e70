from shuttle.schemas.user import UserCreate, UserLogin, UserResponse, ProfileUpdate, SessionResponse, Token
from shuttle.schemas.route import RouteOption, RouteUpsert, RouteDetailsUpdate, RouteListResponse
from shuttle.schemas.station import StationOut, StationUpsert
from shuttle.schemas.booking import BookingCreate, BookingResponse, BatchBookingResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "ProfileUpdate", "SessionResponse", "Token",
    "RouteOption", "RouteUpsert", "RouteDetailsUpdate", "RouteListResponse",
    "StationOut", "StationUpsert",
    "BookingCreate", "BookingResponse", "BatchBookingResponse",
]
