"""
Google Calendar Service
Creates and deletes crew assignment events through the Calendar v3 API
"""
import logging
from typing import Optional

import httpx

from ..config import GOOGLE_API_TIMEOUT
from ..domain.scheduling.errors import CalendarAuthError, CalendarRequestError
from ..domain.scheduling.schemas import CalendarEventDescriptor

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return response.text


def _raise_for_auth(response: httpx.Response) -> None:
    if response.status_code == 401:
        raise CalendarAuthError(_error_message(response))
    if response.status_code == 403 and "insufficient" in response.text.lower():
        # Token lacks calendar scope; only a reconnect fixes that
        raise CalendarAuthError(_error_message(response))


class GoogleCalendarClient:
    """Thin async client over the Calendar v3 events endpoints"""

    def __init__(self, calendar_id: str = "primary", http_client: Optional[httpx.AsyncClient] = None):
        self.calendar_id = calendar_id
        self._http_client = http_client

    async def _request(self, method: str, url: str, access_token: str, **kwargs) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            if self._http_client is not None:
                return await self._http_client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=GOOGLE_API_TIMEOUT) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise CalendarRequestError(f"{method} {url} failed: {e}") from e

    async def create_event(self, access_token: str, descriptor: CalendarEventDescriptor) -> str:
        """Create one event, returning its Google id"""
        response = await self._request(
            "POST",
            f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events",
            access_token,
            json=descriptor.to_google_body(),
        )
        _raise_for_auth(response)

        if response.status_code not in (200, 201):
            message = _error_message(response)
            logger.error(f"❌ Failed to create calendar event: {message}")
            raise CalendarRequestError(message, status_code=response.status_code)

        event_id = response.json().get("id")
        if not event_id:
            raise CalendarRequestError("Calendar API returned no event id", status_code=response.status_code)

        logger.info(f"✅ Google Calendar event created: {event_id}")
        return event_id

    async def delete_event(self, access_token: str, external_id: str) -> None:
        """Delete one event; an event that is already gone counts as deleted"""
        response = await self._request(
            "DELETE",
            f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events/{external_id}",
            access_token,
        )
        _raise_for_auth(response)

        if response.status_code in (404, 410):
            logger.info(f"ℹ️ Google Calendar event already gone: {external_id}")
            return

        if response.status_code not in (200, 204):
            message = _error_message(response)
            logger.error(f"❌ Failed to delete calendar event {external_id}: {message}")
            raise CalendarRequestError(message, status_code=response.status_code)

        logger.info(f"✅ Google Calendar event deleted: {external_id}")
