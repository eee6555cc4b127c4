"""
Domain errors raised by the reporting engine.

Each error carries the HTTP status the API layer answers with; the
FastAPI app registers a single handler for ReportingError.
"""

from fastapi import status


class ReportingError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidReportType(ReportingError):
    def __init__(self, report_type: str) -> None:
        super().__init__(f"Invalid report type: '{report_type}'")
        self.report_type = report_type


class NoTeamForUser(ReportingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_id) -> None:
        super().__init__(f"User {user_id} does not belong to any team")
        self.user_id = user_id


class TeamNotFound(ReportingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, team_id) -> None:
        super().__init__(f"Team {team_id} not found")
        self.team_id = team_id


class InvalidTimezone(ReportingError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown timezone: '{name}'")
        self.name = name


class InvalidDateRange(ReportingError):
    pass


class InvalidClockSequence(ReportingError):
    status_code = status.HTTP_409_CONFLICT
