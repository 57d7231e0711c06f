from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from ..models.medication import Frequency, Medication
from .schedule import dose_schedule, is_interval_dosing, next_occurrence
from .timezone import convert_time_of_day_to_local, to_zone


NOT_STARTED = "Not started"
DUE_NOW = "Due Now"


class ScheduleSummary(BaseModel):
    label: str
    next_occurrence: Optional[datetime] = None
    is_overdue: bool = False
    is_cross_timezone: bool = False


#------This Function renders the next dose time for display---------
def display_label(
    medication: Medication,
    taken_count_today: int,
    now: datetime,
    device_zone: str,
) -> str:
    if is_interval_dosing(medication):
        next_time = next_occurrence(medication, taken_count_today, now, device_zone)
        if next_time is None:
            return NOT_STARTED
        if next_time < now:
            return DUE_NOW
        return to_zone(next_time, device_zone).strftime("%H:%M")

    schedule = dose_schedule(medication)
    if not schedule:
        return ""

    origin_zone = medication.origin_timezone or device_zone
    if taken_count_today >= len(schedule):
        local_time = convert_time_of_day_to_local(schedule[0], origin_zone, device_zone, now)
        return f"{local_time} (Tomorrow)"

    return convert_time_of_day_to_local(
        schedule[max(0, taken_count_today)], origin_zone, device_zone, now
    )


#------This Function tells whether the schedule was authored in another zone---------
def is_cross_timezone(medication: Medication, device_zone: str) -> bool:
    if medication.frequency == Frequency.EVERY_X_HOURS:
        return False
    return bool(medication.origin_timezone) and medication.origin_timezone != device_zone


#------This Function bundles the display fields of one medication---------
def schedule_summary(
    medication: Medication,
    taken_count_today: int,
    now: datetime,
    device_zone: str,
) -> ScheduleSummary:
    next_time = next_occurrence(medication, taken_count_today, now, device_zone)
    return ScheduleSummary(
        label=display_label(medication, taken_count_today, now, device_zone),
        next_occurrence=next_time,
        is_overdue=next_time is not None and next_time <= now,
        is_cross_timezone=is_cross_timezone(medication, device_zone),
    )
