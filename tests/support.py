import asyncio
from datetime import datetime
import pytz


NEW_YORK = "America/New_York"
LONDON = "Europe/London"

# 07:00 in New York, 12:00 in London
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=pytz.utc)


def ny(year, month, day, hour, minute=0):
    return pytz.timezone(NEW_YORK).localize(datetime(year, month, day, hour, minute))


class RecordingNotifier:

    def __init__(self):
        self.reminders = []
        self.refills = []

    async def send_medication_reminder(self, title, body, medication_id):
        self.reminders.append((title, body, medication_id))
        return 1

    async def send_refill_warning(self, medication_name, medication_id, stock):
        self.refills.append((medication_name, medication_id, stock))
        return 1


class SlowNotifier(RecordingNotifier):
    """Yields to the event loop while delivering, like a real push call."""

    async def send_medication_reminder(self, title, body, medication_id):
        await asyncio.sleep(0.01)
        return await super().send_medication_reminder(title, body, medication_id)
