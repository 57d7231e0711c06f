import asyncio
import logging
from typing import List
from pillguard.core.clock import DeviceClock
from pillguard.core.config import settings
from pillguard.core.storage import KeyValueStore
from pillguard.db.medications import MedicationRepository
from pillguard.db.reminders import ReminderRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.models.medication import Medication
from .reminders import ReminderScheduler
from .schedule import find_due_medications

logger = logging.getLogger(__name__)


#------This Function runs one monitor pass---------
async def check_due_medications(store: KeyValueStore, clock: DeviceClock) -> List[Medication]:
    now = clock.now()
    medications = await MedicationRepository(store).load()
    taken_log = await TakenLogRepository(store).get_log(now.date())

    due = find_due_medications(
        medications, taken_log, now, clock.zone, settings.due_window_seconds
    )
    await ReminderScheduler(ReminderRepository(store)).dispatch_due(now)
    return due


#------This Function polls schedules for due doses---------
async def monitor_due_medications(store: KeyValueStore, clock: DeviceClock):
    logger.info("Starting due-dose monitor task")

    while True:
        try:
            await asyncio.sleep(settings.monitor_interval_seconds)

            due = await check_due_medications(store, clock)

            if due:
                logger.info(f"{len(due)} medication(s) due now: {', '.join(m.name for m in due)}")

        except asyncio.CancelledError:
            logger.info("Monitor task cancelled")
            break
        except Exception as e:
            logger.error(f"Error in monitor task: {e}", exc_info=True)
