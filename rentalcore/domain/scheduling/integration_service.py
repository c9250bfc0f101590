"""
Calendar sync for crew assignments.

One assignment maps to one Google Calendar event per event day. Every sync is
delete-then-recreate: the stored external ids are deleted, the assignment is
expanded again, and the new ids replace the old list. Calls run one at a time
so partial failures and rollback stay in order.

Two concurrent syncs of the same assignment are not serialized; the last
write of the id list wins and the loser's events are left behind.
"""

import logging
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import CALENDAR_TIMEZONE
from ...services.calendar_credentials import GoogleCredentialService
from ...services.google_calendar_service import GoogleCalendarClient
from .errors import (
    CalendarAuthError,
    CalendarRequestError,
    CredentialInvalidError,
    CredentialUnavailableError,
)
from .event_expansion import expand_assignment
from .repository import SchedulingRepository
from .schemas import SyncFailure, SyncResult

logger = logging.getLogger(__name__)


class CalendarSyncService:
    """Keeps a crew member's Google Calendar in step with their assignments"""

    def __init__(
        self,
        db: Session,
        credentials: Optional[GoogleCredentialService] = None,
        calendar: Optional[GoogleCalendarClient] = None,
        zone: Optional[ZoneInfo] = None,
    ):
        self.db = db
        self.repo = SchedulingRepository()
        self.credentials = credentials or GoogleCredentialService()
        self.calendar = calendar or GoogleCalendarClient()
        self.zone = zone or ZoneInfo(CALENDAR_TIMEZONE)

    # ========================================================================
    # SYNC
    # ========================================================================

    async def sync_assignment(self, tenant_id: str, assignment_id: str) -> SyncResult:
        """Idempotent upsert of an assignment's calendar events"""
        try:
            return await self._sync(tenant_id, assignment_id)
        except Exception as e:
            logger.error(f"❌ Unexpected error syncing assignment {assignment_id}: {str(e)}")
            return SyncResult.failure(SyncFailure.TRANSIENT_EXTERNAL_FAILURE)

    async def _sync(self, tenant_id: str, assignment_id: str) -> SyncResult:
        assignment = self.repo.get_assignment(self.db, tenant_id, assignment_id)
        if not assignment:
            return SyncResult.failure(SyncFailure.NOT_FOUND)

        crew_member = assignment.crew_member
        event = assignment.event
        if not crew_member or not event:
            return SyncResult.failure(SyncFailure.NOT_FOUND)

        if not crew_member.google_calendar_refresh_token or not crew_member.google_calendar_connected:
            logger.info(f"ℹ️ Crew member {crew_member.id} has no connected calendar, skipping sync")
            return SyncResult.success()

        # Read everything needed up front; commits below expire loaded rows
        crew_member_id = crew_member.id
        stored_credential = crew_member.google_calendar_refresh_token
        old_ids = list(assignment.external_event_ids or [])
        descriptors = expand_assignment(
            role=assignment.role,
            event_name=event.name,
            location=event.location,
            start_date=event.start_date,
            end_date=event.end_date,
            zone=self.zone,
            call_time=assignment.call_time,
            end_time=assignment.end_time,
        )

        try:
            access_token = await self.credentials.resolve_access_token(stored_credential)
        except CredentialInvalidError as e:
            self._disconnect(tenant_id, crew_member_id, str(e))
            return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID)
        except CredentialUnavailableError as e:
            logger.warning(f"⚠️ Could not get access token for crew {crew_member_id}: {str(e)}")
            return SyncResult.failure(SyncFailure.TRANSIENT_EXTERNAL_FAILURE)

        # Clear previous events; a stale event is better than a blocked sync
        surviving_old_ids = []
        for external_id in old_ids:
            try:
                await self.calendar.delete_event(access_token, external_id)
            except CalendarAuthError as e:
                self._disconnect(tenant_id, crew_member_id, str(e))
                return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID)
            except CalendarRequestError as e:
                logger.warning(f"⚠️ Could not delete old calendar event {external_id}: {str(e)}")
                surviving_old_ids.append(external_id)

        created_ids: list[str] = []
        for descriptor in descriptors:
            try:
                created_ids.append(await self.calendar.create_event(access_token, descriptor))
            except CalendarAuthError as e:
                self._disconnect(tenant_id, crew_member_id, str(e))
                stragglers = await self._rollback(access_token, created_ids)
                # Old events are gone by now; record only what may still exist remotely
                self.repo.update_assignment_external_ids(
                    self.db, tenant_id, assignment_id, surviving_old_ids + stragglers
                )
                return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID, failed_ids=stragglers)
            except CalendarRequestError as e:
                logger.warning(
                    f"⚠️ Skipping calendar day {descriptor.start.date()} for assignment "
                    f"{assignment_id}: {str(e)}"
                )

        if not created_ids:
            logger.error(f"❌ No calendar events could be created for assignment {assignment_id}")
            return SyncResult.failure(SyncFailure.ALL_CREATES_FAILED)

        self.repo.update_assignment_external_ids(self.db, tenant_id, assignment_id, created_ids)
        logger.info(
            f"✅ Synced assignment {assignment_id}: {len(created_ids)}/{len(descriptors)} day(s)"
        )
        return SyncResult.success(created_ids[0])

    async def _rollback(self, access_token: str, created_ids: list[str]) -> list[str]:
        """Delete what this batch created; returns ids that could not be deleted"""
        stragglers = []
        for index, external_id in enumerate(created_ids):
            try:
                await self.calendar.delete_event(access_token, external_id)
            except CalendarAuthError:
                # Token is dead, nothing else will delete either
                stragglers.extend(created_ids[index:])
                break
            except CalendarRequestError as e:
                logger.warning(f"⚠️ Rollback could not delete calendar event {external_id}: {str(e)}")
                stragglers.append(external_id)

        if stragglers:
            logger.error(f"❌ Rollback left {len(stragglers)} calendar event(s) behind")
        else:
            logger.info(f"🔄 Rolled back {len(created_ids)} calendar event(s)")
        return stragglers

    # ========================================================================
    # REMOVE
    # ========================================================================

    async def remove_assignment_sync(self, tenant_id: str, assignment_id: str) -> SyncResult:
        """Delete an assignment's calendar events; the id list is kept unless all are gone"""
        try:
            return await self._remove(tenant_id, assignment_id)
        except Exception as e:
            logger.error(f"❌ Unexpected error removing calendar sync for {assignment_id}: {str(e)}")
            return SyncResult.failure(SyncFailure.TRANSIENT_EXTERNAL_FAILURE)

    async def _remove(self, tenant_id: str, assignment_id: str) -> SyncResult:
        assignment = self.repo.get_assignment(self.db, tenant_id, assignment_id)
        if not assignment:
            return SyncResult.failure(SyncFailure.NOT_FOUND)

        external_ids = list(assignment.external_event_ids or [])
        if not external_ids:
            return SyncResult.success()

        crew_member = assignment.crew_member
        if not crew_member or not crew_member.google_calendar_refresh_token:
            # Nothing can reach those events any more
            self.repo.clear_assignment_external_ids(self.db, tenant_id, assignment_id)
            return SyncResult.success()

        crew_member_id = crew_member.id
        if not crew_member.google_calendar_connected:
            return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID, failed_ids=external_ids)

        try:
            access_token = await self.credentials.resolve_access_token(
                crew_member.google_calendar_refresh_token
            )
        except CredentialInvalidError as e:
            self._disconnect(tenant_id, crew_member_id, str(e))
            return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID, failed_ids=external_ids)
        except CredentialUnavailableError as e:
            logger.warning(f"⚠️ Could not get access token for crew {crew_member_id}: {str(e)}")
            return SyncResult.failure(SyncFailure.TRANSIENT_EXTERNAL_FAILURE, failed_ids=external_ids)

        failed_ids = []
        for index, external_id in enumerate(external_ids):
            try:
                await self.calendar.delete_event(access_token, external_id)
            except CalendarAuthError as e:
                self._disconnect(tenant_id, crew_member_id, str(e))
                failed_ids.extend(external_ids[index:])
                return SyncResult.failure(SyncFailure.CREDENTIAL_INVALID, failed_ids=failed_ids)
            except CalendarRequestError as e:
                logger.warning(f"⚠️ Could not delete calendar event {external_id}: {str(e)}")
                failed_ids.append(external_id)

        if failed_ids:
            logger.warning(
                f"⚠️ {len(failed_ids)} calendar event(s) left for assignment {assignment_id}, "
                "keeping ids for retry"
            )
            return SyncResult.failure(SyncFailure.TRANSIENT_EXTERNAL_FAILURE, failed_ids=failed_ids)

        self.repo.clear_assignment_external_ids(self.db, tenant_id, assignment_id)
        logger.info(f"✅ Removed {len(external_ids)} calendar event(s) for assignment {assignment_id}")
        return SyncResult.success()

    def _disconnect(self, tenant_id: str, crew_member_id: str, reason: str) -> None:
        logger.warning(f"⚠️ Google Calendar credential invalid for crew {crew_member_id}: {reason}")
        self.repo.set_crew_member_disconnected(self.db, tenant_id, crew_member_id)
