from datetime import date, datetime

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from rentalcore.domain.crew.schemas import CrewMemberCreate, CrewMemberResponse, CrewMemberUpdate, LeaveUpdate
from rentalcore.domain.crew.service import CrewService

from .conftest import OTHER_TENANT_ID, TENANT_ID, UTC


@pytest.fixture
def service(db):
    return CrewService(db, zone=UTC)


class TestCrewMemberSchemas:
    def test_email_and_phone_are_normalized(self):
        data = CrewMemberCreate(name="  Sam Lee ", email="Sam.Lee@Example.COM", contact="+1 (555) 010-2030")

        assert data.name == "Sam Lee"
        assert data.email == "sam.lee@example.com"
        assert data.contact == "+15550102030"

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "   "},
            {"name": "Sam", "email": "not-an-email"},
            {"name": "Sam", "contact": "12-34"},
            {"name": "Sam", "role": "Contractor"},
            {"name": "Sam", "rate_type": "yearly", "base_rate": 10},
        ],
    )
    def test_invalid_fields_are_rejected(self, fields):
        with pytest.raises(ValidationError):
            CrewMemberCreate(**fields)

    def test_response_reads_orm_rows_without_token(self, make_connected_crew):
        crew = make_connected_crew(name="Sam Lee")

        body = CrewMemberResponse.model_validate(crew).model_dump()

        assert body["name"] == "Sam Lee"
        assert body["google_calendar_connected"] is True
        assert "google_calendar_refresh_token" not in body


class TestCreate:
    def test_create_crew_member(self, service):
        crew = service.create_crew_member(
            TENANT_ID,
            CrewMemberCreate(name="Sam Lee", email="sam@example.com", rate_type="daily", base_rate=350),
        )

        assert crew.id
        assert crew.tenant_id == TENANT_ID
        assert crew.role == "Own Crew"
        assert crew.on_leave is False
        assert crew.google_calendar_connected is False

    def test_rate_type_needs_positive_rate(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.create_crew_member(TENANT_ID, CrewMemberCreate(name="Sam", rate_type="hourly", base_rate=0))

        assert exc_info.value.status_code == 400
        assert "Base rate is required" in exc_info.value.detail

    def test_rate_needs_rate_type(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.create_crew_member(TENANT_ID, CrewMemberCreate(name="Sam", base_rate=40))

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Rate type is required when base rate is provided"

    def test_duplicate_email_in_same_tenant(self, service, make_crew):
        make_crew(email="sam@example.com")

        with pytest.raises(HTTPException) as exc_info:
            service.create_crew_member(TENANT_ID, CrewMemberCreate(name="Sam", email="SAM@example.com"))

        assert exc_info.value.status_code == 409

    def test_same_email_in_other_tenant_is_allowed(self, service, make_crew):
        make_crew(tenant_id=OTHER_TENANT_ID, email="sam@example.com")

        crew = service.create_crew_member(TENANT_ID, CrewMemberCreate(name="Sam", email="sam@example.com"))

        assert crew.email == "sam@example.com"


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, service, make_crew):
        crew = make_crew(name="Sam", email="sam@example.com", technician_type="Sound")

        updated = service.update_crew_member(TENANT_ID, crew.id, CrewMemberUpdate(technician_type="Lighting"))

        assert updated.technician_type == "Lighting"
        assert updated.email == "sam@example.com"

    def test_rate_pair_checked_against_stored_values(self, service, make_crew):
        crew = make_crew(rate_type="hourly", base_rate=45)

        assert service.update_crew_member(TENANT_ID, crew.id, CrewMemberUpdate(base_rate=50)).base_rate == 50

        crew_without_rate = make_crew(name="No Rate")
        with pytest.raises(HTTPException) as exc_info:
            service.update_crew_member(TENANT_ID, crew_without_rate.id, CrewMemberUpdate(rate_type="daily"))
        assert exc_info.value.status_code == 400

    def test_email_taken_by_someone_else(self, service, make_crew):
        make_crew(name="First", email="first@example.com")
        second = make_crew(name="Second", email="second@example.com")

        with pytest.raises(HTTPException) as exc_info:
            service.update_crew_member(TENANT_ID, second.id, CrewMemberUpdate(email="first@example.com"))

        assert exc_info.value.status_code == 409

    def test_keeping_own_email_is_fine(self, service, make_crew):
        crew = make_crew(email="sam@example.com")

        updated = service.update_crew_member(TENANT_ID, crew.id, CrewMemberUpdate(email="sam@example.com"))

        assert updated.email == "sam@example.com"

    def test_other_tenant_crew_member_is_not_found(self, service, make_crew):
        crew = make_crew(tenant_id=OTHER_TENANT_ID)

        with pytest.raises(HTTPException) as exc_info:
            service.update_crew_member(TENANT_ID, crew.id, CrewMemberUpdate(name="Stolen"))

        assert exc_info.value.status_code == 404


def test_delete_removes_assignments(db, service, make_crew, make_event, make_assignment):
    from rentalcore import models

    crew = make_crew()
    make_assignment(make_event(), crew)

    assert service.delete_crew_member(TENANT_ID, crew.id) == {"message": "Crew member deleted"}
    assert db.query(models.EventCrew).count() == 0


class TestLeave:
    def test_mark_on_leave(self, service, make_crew):
        crew = make_crew()

        updated = service.update_leave(
            TENANT_ID,
            crew.id,
            LeaveUpdate(
                on_leave=True,
                leave_start_date=date(2024, 7, 1),
                leave_end_date=date(2024, 7, 5),
                leave_reason="Vacation",
            ),
        )

        assert updated.on_leave is True
        assert (updated.leave_start_date, updated.leave_end_date) == (date(2024, 7, 1), date(2024, 7, 5))
        assert updated.leave_reason == "Vacation"

    def test_single_day_leave(self, service, make_crew):
        crew = make_crew()

        updated = service.update_leave(
            TENANT_ID,
            crew.id,
            LeaveUpdate(on_leave=True, leave_start_date=date(2024, 7, 1), leave_end_date=date(2024, 7, 1)),
        )

        assert updated.leave_end_date == date(2024, 7, 1)

    def test_dates_required(self, service, make_crew):
        crew = make_crew()

        with pytest.raises(HTTPException) as exc_info:
            service.update_leave(TENANT_ID, crew.id, LeaveUpdate(on_leave=True, leave_start_date=date(2024, 7, 1)))

        assert exc_info.value.status_code == 400

    def test_end_before_start(self, service, make_crew):
        crew = make_crew()

        with pytest.raises(HTTPException) as exc_info:
            service.update_leave(
                TENANT_ID,
                crew.id,
                LeaveUpdate(on_leave=True, leave_start_date=date(2024, 7, 5), leave_end_date=date(2024, 7, 1)),
            )

        assert exc_info.value.detail == "Leave end date must be after start date"

    def test_taking_off_leave_clears_dates(self, service, make_crew):
        crew = make_crew(
            on_leave=True, leave_start_date=date(2024, 7, 1), leave_end_date=date(2024, 7, 5), leave_reason="Sick"
        )

        updated = service.update_leave(TENANT_ID, crew.id, LeaveUpdate(on_leave=False))

        assert updated.on_leave is False
        assert updated.leave_start_date is None
        assert updated.leave_end_date is None
        assert updated.leave_reason is None


class TestCalendarData:
    def test_busy_ranges_sorted_by_start(self, service, make_crew, make_event, make_assignment):
        crew = make_crew()
        later = make_event(start_date=date(2024, 6, 10), name="Later Gig")
        earlier = make_event(start_date=date(2024, 6, 1), end_date=date(2024, 6, 2), name="Earlier Gig")
        make_assignment(later, crew)
        make_assignment(
            earlier,
            crew,
            call_time=datetime(2024, 6, 1, 8, 0, tzinfo=UTC),
            end_time=datetime(2024, 6, 2, 17, 0, tzinfo=UTC),
        )

        busy = service.get_calendar_data(TENANT_ID, crew.id)

        assert [b.event_name for b in busy] == ["Earlier Gig", "Later Gig"]
        assert busy[0].start == datetime(2024, 6, 1, 8, 0, tzinfo=UTC)
        assert busy[0].call_time == datetime(2024, 6, 1, 8, 0, tzinfo=UTC)
        assert busy[1].start == datetime(2024, 6, 10, 0, 0, tzinfo=UTC)
        assert busy[1].end.date() == date(2024, 6, 10)
        assert busy[1].call_time is None

    def test_excluded_event(self, service, make_crew, make_event, make_assignment):
        crew = make_crew()
        current = make_event(name="Current")
        other = make_event(start_date=date(2024, 6, 5), name="Other")
        make_assignment(current, crew)
        make_assignment(other, crew)

        excluded = service.get_calendar_data(TENANT_ID, crew.id, exclude_event_id=current.id)
        included = service.get_calendar_data(
            TENANT_ID, crew.id, exclude_event_id=current.id, include_current_event=True
        )

        assert [b.event_name for b in excluded] == ["Other"]
        assert [b.event_name for b in included] == ["Current", "Other"]

    def test_unknown_crew_member(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.get_calendar_data(TENANT_ID, "missing")

        assert exc_info.value.status_code == 404


def test_disconnect_google_calendar(service, make_connected_crew):
    crew = make_connected_crew(google_calendar_token_expiry=datetime(2024, 6, 1, 12, 0, tzinfo=UTC))

    result = service.disconnect_google_calendar(TENANT_ID, crew.id)
    refreshed = service.get_crew_member(TENANT_ID, crew.id)

    assert result == {"success": True, "message": "Google Calendar disconnected"}
    assert refreshed.google_calendar_connected is False
    assert refreshed.google_calendar_refresh_token is None
    assert refreshed.google_calendar_token_expiry is None
