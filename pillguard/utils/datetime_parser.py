import re
from typing import Optional, Tuple
from datetime import datetime
import dateparser


TIME_OF_DAY_PATTERN = re.compile(r'^([01]?[0-9]|2[0-3]):([0-5][0-9])$')


#------This Function splits an HH:MM string into hour and minute---------
def parse_time_of_day(value: str) -> Tuple[int, int]:
    match = TIME_OF_DAY_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f'Invalid time format: {value}. Use HH:MM format.')
    return int(match.group(1)), int(match.group(2))


#------This Function formats hour and minute as HH:MM---------
def format_time_of_day(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


#------This Function normalizes free text like "8pm" to HH:MM---------
def normalize_time_of_day(
    text: str, reference_datetime: Optional[datetime] = None
) -> Optional[str]:
    if not text:
        return None

    try:
        hour, minute = parse_time_of_day(text)
        return format_time_of_day(hour, minute)
    except ValueError:
        pass

    settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": reference_datetime or datetime.utcnow(),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }

    try:
        parsed_dt = dateparser.parse(text, settings=settings)
    except Exception:
        return None
    if parsed_dt is None:
        return None
    return format_time_of_day(parsed_dt.hour, parsed_dt.minute)
