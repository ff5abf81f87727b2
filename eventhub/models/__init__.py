from eventhub.models.user import User
from eventhub.models.event import Event, SeatCategory, EventDate, AvailableSeats

__all__ = ["User", "Event", "SeatCategory", "EventDate", "AvailableSeats"]
