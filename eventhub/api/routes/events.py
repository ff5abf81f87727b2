"""
Event endpoints: create (admin/owner only, multipart form) and list.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger
from eventhub.core.security import AuthContext, require_event_manager
from eventhub.db.session import get_db
from eventhub.schemas.event import (
    EventCreate, EventCreatedResponse, EventListResponse, ErrorResponse,
)
from eventhub.services.event_service import create_event, list_events

logger = get_logger(__name__)
settings = get_settings()
router = APIRouter(prefix="/events", tags=["Events"])


@router.post(
    "",
    response_model=EventCreatedResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_event_endpoint(
    request: Request,
    auth: AuthContext = Depends(require_event_manager),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an event from a multipart form.

    Fields: title, description, location, picture (file), dates (JSON array
    of {event_date, start_time, end_time}) and categories (JSON array of
    {name, price}). The form is only read once the caller is authorized.
    """
    async with request.form() as form:
        data = EventCreate.from_form(form)
        event = await create_event(db, auth, data, form.get("picture"))
    return EventCreatedResponse(event_id=event.event_id)


@router.get("", response_model=EventListResponse, responses={500: {"model": ErrorResponse}})
async def list_events_endpoint(request: Request, db: AsyncSession = Depends(get_db)):
    """
    List all events, newest first, with their lowest category price.
    Only answers API calls (X-Requested-With); browsers are redirected away.
    """
    if not request.headers.get("x-requested-with"):
        host = request.headers.get("host", request.url.netloc)
        protocol = request.headers.get("x-forwarded-proto", "https")
        logger.info("events_list_redirected", host=host)
        return RedirectResponse(f"{protocol}://{host}{settings.FORBIDDEN_PATH}")

    events = await list_events(db)
    return EventListResponse(events=events)
