from datetime import datetime, timedelta
import pytest
import pytz
from pydantic import ValidationError
from pillguard.models.medication import Frequency, Medication
from pillguard.services.schedule import dose_schedule, find_due_medications, next_occurrence
from support import LONDON, NEW_YORK, NOW, ny


def test_daily_rolls_over_to_tomorrow(make_med):
    med = make_med(scheduled_times=["08:00"])
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 8)
    assert next_occurrence(med, 1, NOW, NEW_YORK) == ny(2024, 1, 16, 8)


def test_result_is_expressed_in_device_zone(make_med):
    result = next_occurrence(make_med(), 0, NOW, NEW_YORK)
    assert result.tzinfo.zone == NEW_YORK
    assert (result.hour, result.minute) == (8, 0)


def test_twice_daily_indexes_by_taken_count(make_med):
    med = make_med(frequency=Frequency.TWICE_DAILY, scheduled_times=["08:00", "20:00"])
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 8)
    assert next_occurrence(med, 1, NOW, NEW_YORK) == ny(2024, 1, 15, 20)
    assert next_occurrence(med, 2, NOW, NEW_YORK) == ny(2024, 1, 16, 8)


def test_twice_daily_advances_through_past_slots(make_med):
    med = make_med(frequency=Frequency.TWICE_DAILY, scheduled_times=["05:00", "06:00"])
    assert next_occurrence(med, 1, NOW, NEW_YORK) == ny(2024, 1, 15, 6)


def test_overdue_dose_is_not_clamped(make_med):
    med = make_med(scheduled_times=["06:00"])
    result = next_occurrence(med, 0, NOW, NEW_YORK)
    assert result == ny(2024, 1, 15, 6)
    assert result < NOW


def test_interval_dosing_anchors_on_last_dose(make_med):
    last = datetime(2024, 1, 15, 10, 0, tzinfo=pytz.utc)
    med = make_med(
        frequency=Frequency.EVERY_X_HOURS,
        interval_hours=6,
        primary_time="09:00",
        last_taken_at=last,
    )
    expected = last + timedelta(hours=6)
    assert next_occurrence(med, 0, NOW, NEW_YORK) == expected
    assert next_occurrence(med, 5, NOW, NEW_YORK) == expected


def test_interval_dosing_starts_at_primary_time(make_med):
    med = make_med(frequency=Frequency.EVERY_X_HOURS, interval_hours=8, primary_time="09:00")
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 9)


def test_interval_dosing_without_start_has_no_occurrence(make_med):
    med = make_med(
        frequency=Frequency.EVERY_X_HOURS, interval_hours=8, scheduled_times=[], primary_time=None
    )
    assert next_occurrence(med, 0, NOW, NEW_YORK) is None


def test_empty_schedule_has_no_occurrence(make_med):
    med = make_med(scheduled_times=[], primary_time=None)
    assert dose_schedule(med) == []
    assert next_occurrence(med, 0, NOW, NEW_YORK) is None


def test_primary_time_is_the_fallback_schedule(make_med):
    med = make_med(frequency=Frequency.WEEKLY, scheduled_times=[], primary_time="10:30")
    assert dose_schedule(med) == ["10:30"]
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 10, 30)


def test_origin_timezone_is_converted_to_device_zone(make_med):
    med = make_med(origin_timezone=LONDON, scheduled_times=["08:00"])
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 3)


def test_missing_origin_timezone_means_device_local(make_med):
    med = make_med(origin_timezone=None)
    assert next_occurrence(med, 0, NOW, LONDON) == datetime(2024, 1, 15, 8, 0, tzinfo=pytz.utc)


def test_unresolvable_origin_zone_is_treated_as_local():
    med = Medication.model_construct(
        id="x",
        name="Legacy",
        frequency=Frequency.DAILY,
        scheduled_times=["08:00"],
        primary_time="08:00",
        origin_timezone="Mars/Olympus_Mons",
    )
    assert next_occurrence(med, 0, NOW, NEW_YORK) == ny(2024, 1, 15, 8)


def test_model_sorts_twice_daily_times(make_med):
    med = make_med(frequency=Frequency.TWICE_DAILY, scheduled_times=["20:00", "8:00"])
    assert med.scheduled_times == ["08:00", "20:00"]
    assert med.primary_time == "08:00"


def test_model_rejects_inconsistent_schedules(make_med):
    with pytest.raises(ValidationError):
        make_med(frequency=Frequency.TWICE_DAILY, scheduled_times=["08:00"])
    with pytest.raises(ValidationError):
        make_med(frequency=Frequency.EVERY_X_HOURS, interval_hours=None)
    with pytest.raises(ValidationError):
        make_med(frequency=Frequency.EVERY_X_HOURS, interval_hours=0)
    with pytest.raises(ValidationError):
        make_med(scheduled_times=["25:00"])
    with pytest.raises(ValidationError):
        make_med(origin_timezone="Mars/Olympus_Mons")


def test_interval_model_drops_wall_clock_times(make_med):
    med = make_med(frequency=Frequency.EVERY_X_HOURS, interval_hours=6, scheduled_times=["07:15"])
    assert med.scheduled_times == []
    assert med.primary_time == "07:15"


def test_millisecond_timestamps_are_read_as_utc():
    med = Medication.model_validate({
        "id": "x",
        "name": "Ibuprofen",
        "frequency": "Every X Hours",
        "interval_hours": 6,
        "last_taken_at": 1705312800000,
    })
    assert med.last_taken_at == datetime(2024, 1, 15, 10, 0, tzinfo=pytz.utc)


def test_find_due_medications_uses_the_window(make_med):
    due_now = make_med(id="a", scheduled_times=["07:00"])
    missed = make_med(id="b", scheduled_times=["06:59"])
    later = make_med(id="c", scheduled_times=["09:00"])
    taken = make_med(id="d", scheduled_times=["07:00"])

    due = find_due_medications(
        [due_now, missed, later, taken], {"d": 1}, NOW, NEW_YORK, window_seconds=5
    )
    assert [m.id for m in due] == ["a"]
