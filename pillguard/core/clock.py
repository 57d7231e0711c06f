from datetime import datetime, date
from typing import Optional
import pytz
from pillguard.core.config import settings


class DeviceClock:
    """Current instant and timezone of the device the schedules are shown on.

    Schedule functions take ``now`` and ``device_zone`` explicitly; this is the
    one place that reads the host clock, so tests can pin both.
    """

    def __init__(self, zone: Optional[str] = None, fixed_now: Optional[datetime] = None):
        self.zone = zone or settings.device_timezone
        self._fixed_now = fixed_now

    @property
    def tz(self):
        return pytz.timezone(self.zone)

    def now(self) -> datetime:
        if self._fixed_now is not None:
            return self._fixed_now.astimezone(self.tz)
        return datetime.now(pytz.utc).astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()


#------This Function returns the device clock dependency---------
def get_device_clock() -> DeviceClock:
    return DeviceClock()
