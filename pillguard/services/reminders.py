import logging
from datetime import datetime
from typing import List, Optional
from ..db.reminders import ReminderRepository
from ..models.medication import Medication
from ..models.reminder import Reminder
from .notifications import NotificationService, notification_service
from .schedule import next_occurrence

logger = logging.getLogger(__name__)


REMINDER_TITLE = "Medication Reminder"


class ReminderScheduler:
    """Arms one pending reminder per medication at its next occurrence.

    Reminders live in the store and are delivered by ``dispatch_due``, which the
    due-dose monitor calls on every tick.
    """

    def __init__(
        self,
        reminders: ReminderRepository,
        notifier: Optional[NotificationService] = None,
    ):
        self.reminders = reminders
        self.notifier = notifier or notification_service

#------This Function arms the reminder of a medication---------
    async def schedule_reminder(
        self,
        medication: Medication,
        taken_count_today: int,
        now: datetime,
        device_zone: str,
    ) -> Optional[Reminder]:
        fire_at = next_occurrence(medication, taken_count_today, now, device_zone)
        if fire_at is None or fire_at <= now:
            await self.reminders.pop(medication.id)
            logger.debug(f"No future occurrence for medication {medication.id}, reminder not armed")
            return None

        reminder = Reminder(
            medication_id=medication.id,
            title=REMINDER_TITLE,
            body=f"It's time to take your {medication.name}",
            fire_at=fire_at,
            data={"dosage": medication.dosage},
        )
        await self.reminders.put(reminder)
        logger.info(f"Scheduled reminder for medication {medication.id} at {fire_at.isoformat()}")
        return reminder

#------This Function cancels the reminder of a medication---------
    async def cancel_reminder(self, med_id: str) -> bool:
        removed = await self.reminders.pop(med_id)
        if removed is not None:
            logger.info(f"Cancelled reminder for medication {med_id}")
        return removed is not None

#------This Function lists pending reminders---------
    async def pending(self) -> List[Reminder]:
        reminders = await self.reminders.load()
        return sorted(reminders.values(), key=lambda r: r.fire_at)

#------This Function delivers reminders whose time has come---------
    async def dispatch_due(self, now: datetime) -> List[Reminder]:
        reminders = await self.reminders.load()
        due = [r for r in reminders.values() if r.fire_at <= now]
        if not due:
            return []

        for reminder in due:
            await self.notifier.send_medication_reminder(
                title=reminder.title,
                body=reminder.body,
                medication_id=reminder.medication_id,
            )

        await self.reminders.discard(due)
        logger.info(f"Dispatched {len(due)} reminder(s)")
        return due
