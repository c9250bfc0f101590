import json
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from rentalcore.domain.scheduling.errors import CalendarAuthError, CalendarRequestError
from rentalcore.domain.scheduling.schemas import CalendarEventDescriptor
from rentalcore.services.google_calendar_service import GOOGLE_CALENDAR_API, GoogleCalendarClient

UTC = ZoneInfo("UTC")

DESCRIPTOR = CalendarEventDescriptor(
    title="Rigger - Expo",
    description="Event: Expo\nRole: Rigger\nLocation: Hall 3\n\nAssigned via Rental Core.",
    location="Hall 3",
    start=datetime(2024, 6, 1, 9, 0, tzinfo=UTC),
    end=datetime(2024, 6, 1, 18, 0, tzinfo=UTC),
    time_zone="UTC",
)


def make_client(handler):
    return GoogleCalendarClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def test_create_event_posts_body_and_returns_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "evt123"})

    external_id = await make_client(handler).create_event("ya29.token", DESCRIPTOR)

    assert external_id == "evt123"
    assert seen["method"] == "POST"
    assert seen["url"] == f"{GOOGLE_CALENDAR_API}/calendars/primary/events"
    assert seen["auth"] == "Bearer ya29.token"
    assert seen["body"]["summary"] == "Rigger - Expo"
    assert seen["body"]["start"]["dateTime"] == "2024-06-01T09:00:00+00:00"


async def test_create_event_unauthorized_raises_auth_error():
    client = make_client(lambda request: httpx.Response(401, json={"error": {"message": "Invalid Credentials"}}))

    with pytest.raises(CalendarAuthError, match="Invalid Credentials"):
        await client.create_event("ya29.expired", DESCRIPTOR)


async def test_insufficient_scope_raises_auth_error():
    client = make_client(
        lambda request: httpx.Response(403, json={"error": {"message": "Request had insufficient authentication scopes."}})
    )

    with pytest.raises(CalendarAuthError):
        await client.create_event("ya29.token", DESCRIPTOR)


async def test_rate_limit_is_a_request_error():
    client = make_client(lambda request: httpx.Response(403, json={"error": {"message": "Rate Limit Exceeded"}}))

    with pytest.raises(CalendarRequestError) as exc_info:
        await client.create_event("ya29.token", DESCRIPTOR)

    assert exc_info.value.status_code == 403


async def test_network_failure_is_a_request_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(CalendarRequestError):
        await make_client(handler).create_event("ya29.token", DESCRIPTOR)


async def test_delete_event():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        return httpx.Response(204)

    await make_client(handler).delete_event("ya29.token", "evt123")

    assert seen["method"] == "DELETE"
    assert seen["url"] == f"{GOOGLE_CALENDAR_API}/calendars/primary/events/evt123"


@pytest.mark.parametrize("status_code", [404, 410])
async def test_delete_of_missing_event_counts_as_success(status_code):
    await make_client(lambda request: httpx.Response(status_code)).delete_event("ya29.token", "gone")


async def test_delete_server_error():
    client = make_client(lambda request: httpx.Response(500, text="backend error"))

    with pytest.raises(CalendarRequestError) as exc_info:
        await client.delete_event("ya29.token", "evt123")

    assert exc_info.value.status_code == 500
