import asyncio
import json
import logging
from typing import Dict, List, Optional
from pydantic import ValidationError
from pillguard.core.storage import KeyValueStore
from pillguard.models.reminder import Reminder

logger = logging.getLogger(__name__)


REMINDERS_KEY = "pillguard_reminders"

_reminders_lock = asyncio.Lock()


class ReminderRepository:

    def __init__(self, store: KeyValueStore):
        self.store = store

#------This Function loads pending reminders keyed by medication id---------
    async def load(self) -> Dict[str, Reminder]:
        raw = await self.store.get(REMINDERS_KEY)
        if not raw:
            return {}
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load reminders: {e}")
            return {}

        reminders = {}
        for med_id, record in (records.items() if isinstance(records, dict) else []):
            try:
                reminders[med_id] = Reminder.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping invalid reminder for {med_id}: {e}")
        return reminders

#------This Function saves pending reminders---------
    async def save(self, reminders: Dict[str, Reminder]) -> None:
        payload = {med_id: r.model_dump(mode="json") for med_id, r in reminders.items()}
        await self.store.set(REMINDERS_KEY, json.dumps(payload))

#------This Function stores the reminder of a medication---------
    async def put(self, reminder: Reminder) -> None:
        async with _reminders_lock:
            reminders = await self.load()
            reminders[reminder.medication_id] = reminder
            await self.save(reminders)

#------This Function removes the reminder of a medication---------
    async def pop(self, med_id: str) -> Optional[Reminder]:
        async with _reminders_lock:
            reminders = await self.load()
            reminder = reminders.pop(med_id, None)
            if reminder is not None:
                await self.save(reminders)
            return reminder

#------This Function removes delivered reminders that were not re-armed---------
    async def discard(self, delivered: List[Reminder]) -> None:
        async with _reminders_lock:
            reminders = await self.load()
            for reminder in delivered:
                current = reminders.get(reminder.medication_id)
                # a reminder re-armed during delivery has a new fire time
                if current is not None and current.fire_at == reminder.fire_at:
                    del reminders[reminder.medication_id]
            await self.save(reminders)
