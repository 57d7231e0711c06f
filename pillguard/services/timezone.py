import logging
from datetime import datetime, timedelta
from typing import Optional
import pytz
from ..utils.datetime_parser import format_time_of_day, parse_time_of_day

logger = logging.getLogger(__name__)


#------This Function checks an IANA zone name---------
def is_valid_timezone(name: Optional[str]) -> bool:
    return bool(name) and name in pytz.all_timezones_set


#------This Function makes a naive datetime aware in the given zone---------
def localize(naive: datetime, zone: str) -> datetime:
    tz = pytz.timezone(zone)
    return tz.normalize(tz.localize(naive))


#------This Function expresses an instant in the given zone---------
def to_zone(instant: datetime, zone: str) -> datetime:
    if instant.tzinfo is None:
        instant = pytz.utc.localize(instant)
    return instant.astimezone(pytz.timezone(zone))


#------This Function computes the wall-clock offset between two zones---------
def zone_offset_millis(target_zone: Optional[str], device_zone: str, now: datetime) -> int:
    """Milliseconds by which ``target_zone``'s wall clock is ahead of ``device_zone``'s at ``now``.

    Unresolvable zones yield 0 so that the time is shown as if it were already local.
    """
    if not target_zone or target_zone == device_zone:
        return 0

    try:
        target_wall = to_zone(now, target_zone).replace(tzinfo=None)
        device_wall = to_zone(now, device_zone).replace(tzinfo=None)
    except (pytz.UnknownTimeZoneError, ValueError, OverflowError) as e:
        logger.warning(f"Error calculating timezone offset for {target_zone}: {e}")
        return 0

    return int((target_wall - device_wall).total_seconds() * 1000)


#------This Function converts an origin-zone HH:MM into device-local HH:MM---------
def convert_time_of_day_to_local(
    time_of_day: str,
    origin_zone: Optional[str],
    device_zone: str,
    now: datetime,
) -> str:
    if not time_of_day or not origin_zone or origin_zone == device_zone:
        return time_of_day

    try:
        hour, minute = parse_time_of_day(time_of_day)
    except ValueError:
        return time_of_day

    offset = zone_offset_millis(origin_zone, device_zone, now)
    origin_wall = datetime(2000, 1, 1, hour, minute)
    local_wall = origin_wall - timedelta(milliseconds=offset)
    return format_time_of_day(local_wall.hour, local_wall.minute)
