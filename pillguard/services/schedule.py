import logging
from datetime import datetime, time, timedelta
from typing import List, Optional
from ..models.medication import Frequency, Medication
from ..utils.datetime_parser import parse_time_of_day
from .timezone import localize, to_zone, zone_offset_millis

logger = logging.getLogger(__name__)


#------This Function tells whether a medication is dosed on an interval---------
def is_interval_dosing(medication: Medication) -> bool:
    return medication.frequency == Frequency.EVERY_X_HOURS and bool(medication.interval_hours)


#------This Function returns the wall-clock dose slots of a medication---------
def dose_schedule(medication: Medication) -> List[str]:
    if medication.scheduled_times:
        return list(medication.scheduled_times)
    if medication.primary_time:
        return [medication.primary_time]
    return []


def _wall_clock(day, time_of_day: str) -> datetime:
    hour, minute = parse_time_of_day(time_of_day)
    return datetime.combine(day, time(hour, minute))


#------This Function computes the next due instant of a medication---------
def next_occurrence(
    medication: Medication,
    taken_count_today: int,
    now: datetime,
    device_zone: str,
) -> Optional[datetime]:
    """Next due instant, as an aware datetime in ``device_zone``.

    A result at or before ``now`` means the dose is due or overdue; ``None``
    means the medication has nothing to schedule, which includes interval
    dosing that was never taken and has no start time. Such a medication is
    not treated as due now; it stays "Not started" until a start time or a
    first dose is recorded.
    """
    local_today = to_zone(now, device_zone).date()

    if is_interval_dosing(medication):
        # taken_count_today is ignored here; interval doses anchor on the last dose only
        if medication.last_taken_at:
            due = medication.last_taken_at + timedelta(hours=medication.interval_hours)
            return to_zone(due, device_zone)
        if not medication.primary_time:
            return None
        return localize(_wall_clock(local_today, medication.primary_time), device_zone)

    schedule = dose_schedule(medication)
    if not schedule:
        return None

    taken = max(0, taken_count_today)
    if taken < len(schedule):
        target_time = schedule[taken]
        target_day = local_today
    else:
        target_time = schedule[0]
        target_day = local_today + timedelta(days=1)

    offset = zone_offset_millis(medication.origin_timezone or device_zone, device_zone, now)
    target_wall = _wall_clock(target_day, target_time) - timedelta(milliseconds=offset)
    return localize(target_wall, device_zone)


#------This Function lists medications that fell due within the window---------
def find_due_medications(
    medications: List[Medication],
    taken_log: dict,
    now: datetime,
    device_zone: str,
    window_seconds: int,
) -> List[Medication]:
    due = []
    for med in medications:
        next_time = next_occurrence(med, taken_log.get(med.id, 0), now, device_zone)
        if next_time is None:
            continue
        diff = (next_time - now).total_seconds()
        if -window_seconds < diff <= 0:
            logger.info(f"Medication {med.id} is due now")
            due.append(med)
    return due
