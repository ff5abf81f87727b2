from eventhub.schemas.user import (
    RegisterRequest, RegisterResponse, ForgotPasswordRequest, ForgotPasswordResponse,
)
from eventhub.schemas.event import (
    DateSlot, CategoryEntry, EventCreate, EventSummary,
    EventListResponse, EventCreatedResponse, ErrorResponse,
)

__all__ = [
    "RegisterRequest", "RegisterResponse", "ForgotPasswordRequest", "ForgotPasswordResponse",
    "DateSlot", "CategoryEntry", "EventCreate", "EventSummary",
    "EventListResponse", "EventCreatedResponse", "ErrorResponse",
]
