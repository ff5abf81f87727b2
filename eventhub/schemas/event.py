"""
Pydantic schemas for event-related request/response validation.

Event creation arrives as a multipart form: scalar fields are plain form
values while ``dates`` and ``categories`` are JSON-encoded arrays.
"""

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from eventhub.core.errors import InvalidFormError


class DateSlot(BaseModel):
    event_date: date
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def check_window(self) -> "DateSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CategoryEntry(BaseModel):
    # Clients also send a category_id from the form builder; it is ignored.
    model_config = {"extra": "ignore"}

    name: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    dates: list[DateSlot] = Field(default_factory=list)
    categories: list[CategoryEntry] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "EventCreate":
        """Build from multipart form values, raising InvalidFormError on bad input."""
        decoded = {}
        for field in ("dates", "categories"):
            raw = form.get(field)
            if raw is None or raw == "":
                decoded[field] = []
                continue
            if not isinstance(raw, str):
                raise InvalidFormError(f"Invalid {field}")
            try:
                decoded[field] = json.loads(raw)
            except json.JSONDecodeError:
                raise InvalidFormError(f"Invalid {field}")

        try:
            return cls(
                title=form.get("title"),
                description=form.get("description"),
                location=form.get("location"),
                **decoded,
            )
        except ValidationError as e:
            raise InvalidFormError(describe_validation_error(e.errors()))


def describe_validation_error(errors: Sequence[dict]) -> str:
    """One human-readable line for the first problem pydantic found."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"Invalid {location}: {message}" if location else message


class EventSummary(BaseModel):
    event_id: int
    title: str
    picture: str
    description: Optional[str]
    location: Optional[str]
    created_at: datetime
    lowest_price: Optional[float] = None

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    success: bool = True
    events: list[EventSummary]


class EventCreatedResponse(BaseModel):
    success: bool = True
    event_id: int


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
