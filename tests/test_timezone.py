from datetime import datetime
import pytest
import pytz
from pillguard.services.timezone import (
    convert_time_of_day_to_local,
    is_valid_timezone,
    zone_offset_millis,
)
from support import LONDON, NEW_YORK, NOW


HOUR_MS = 3600 * 1000


def test_offset_between_zones():
    assert zone_offset_millis(LONDON, NEW_YORK, NOW) == 5 * HOUR_MS
    assert zone_offset_millis(NEW_YORK, LONDON, NOW) == -5 * HOUR_MS


def test_offset_is_zero_for_same_or_missing_zone():
    assert zone_offset_millis(NEW_YORK, NEW_YORK, NOW) == 0
    assert zone_offset_millis(None, NEW_YORK, NOW) == 0
    assert zone_offset_millis("", NEW_YORK, NOW) == 0


def test_offset_fails_open_for_unknown_zone():
    assert zone_offset_millis("Mars/Olympus_Mons", NEW_YORK, NOW) == 0
    assert zone_offset_millis(LONDON, "Not/AZone", NOW) == 0


def test_offset_follows_daylight_saving_on_the_date():
    # New York is on EDT from 10 March, London stays on GMT until 31 March
    mid_march = datetime(2024, 3, 15, 12, 0, tzinfo=pytz.utc)
    assert zone_offset_millis(LONDON, NEW_YORK, mid_march) == 4 * HOUR_MS


def test_offset_handles_half_hour_zones():
    assert zone_offset_millis("Asia/Kolkata", "UTC", NOW) == int(5.5 * HOUR_MS)


def test_convert_time_of_day():
    assert convert_time_of_day_to_local("09:00", LONDON, NEW_YORK, NOW) == "04:00"
    assert convert_time_of_day_to_local("02:00", LONDON, NEW_YORK, NOW) == "21:00"
    assert convert_time_of_day_to_local("20:30", NEW_YORK, LONDON, NOW) == "01:30"


def test_convert_is_noop_without_origin_or_same_zone():
    assert convert_time_of_day_to_local("09:00", None, NEW_YORK, NOW) == "09:00"
    assert convert_time_of_day_to_local("09:00", NEW_YORK, NEW_YORK, NOW) == "09:00"


def test_convert_leaves_malformed_time_untouched():
    assert convert_time_of_day_to_local("9am", LONDON, NEW_YORK, NOW) == "9am"
    assert convert_time_of_day_to_local("", LONDON, NEW_YORK, NOW) == ""


@pytest.mark.parametrize("zone_a,zone_b", [
    (LONDON, NEW_YORK),
    ("Asia/Kolkata", NEW_YORK),
    ("Australia/Adelaide", "America/Los_Angeles"),
    ("Asia/Kathmandu", "UTC"),
    ("Pacific/Auckland", "Pacific/Honolulu"),
])
def test_round_trip_recovers_time(zone_a, zone_b):
    local = convert_time_of_day_to_local("09:00", zone_a, zone_b, NOW)
    assert convert_time_of_day_to_local(local, zone_b, zone_a, NOW) == "09:00"


def test_is_valid_timezone():
    assert is_valid_timezone(LONDON)
    assert not is_valid_timezone("Mars/Olympus_Mons")
    assert not is_valid_timezone(None)
