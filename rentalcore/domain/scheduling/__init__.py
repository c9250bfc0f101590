"""
Scheduling Domain

Crew availability and Google Calendar sync for event assignments.

STRUCTURE:
```
rentalcore/domain/scheduling/
├── __init__.py
├── errors.py               # Credential / calendar exceptions
├── schemas.py              # Verdicts, calendar descriptors, sync results, API models
├── repository.py           # Tenant-scoped assignment and crew queries
├── time_calculator.py      # Range overlap, gaps, day bounds, formatting
├── availability_service.py # Leave / conflict / tight-turnaround checks
├── event_expansion.py      # Assignment -> one calendar event per day
├── integration_service.py  # Delete-then-recreate calendar sync
└── router.py               # /scheduling endpoints
```

ENDPOINTS:
- GET /scheduling/availability - Verdict for one crew member on one event
- GET /scheduling/availability/by-type - Free crew count for a technician type
- POST /scheduling/assignments/{assignment_id}/sync - Push an assignment to Google Calendar
- DELETE /scheduling/assignments/{assignment_id}/sync - Remove it from Google Calendar

EXTERNAL INTEGRATIONS:
- Google OAuth token endpoint (services/calendar_credentials.py)
- Google Calendar v3 events API (services/google_calendar_service.py)

Nothing is imported here; services/ depends on errors.py and schemas.py.
"""
