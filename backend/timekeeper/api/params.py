from datetime import date

from timekeeper.core.exceptions import InvalidDateRange


def parse_date(val: str | None) -> date | None:
    """YYYY-MM-DD → date. Missing values stay None; the service picks the team-local default."""
    if val is None:
        return None
    try:
        return date.fromisoformat(val)
    except ValueError:
        raise InvalidDateRange(f"Invalid date '{val}', expected YYYY-MM-DD")


def parse_range(date_from: str | None, date_to: str | None) -> tuple[date | None, date | None]:
    return parse_date(date_from), parse_date(date_to)
