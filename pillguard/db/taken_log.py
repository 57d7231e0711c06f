import json
import logging
from datetime import date
from typing import Dict
from pillguard.core.storage import KeyValueStore

logger = logging.getLogger(__name__)


LOG_KEY_PREFIX = "pillguard_log_"


#------This Function builds the storage key of a day's log---------
def log_key(day: date) -> str:
    return f"{LOG_KEY_PREFIX}{day.isoformat()}"


class TakenLogRepository:

    def __init__(self, store: KeyValueStore):
        self.store = store

#------This Function reads the taken counts of one day---------
    async def get_log(self, day: date) -> Dict[str, int]:
        raw = await self.store.get(log_key(day))
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable taken log for {day.isoformat()}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            str(k): int(v) for k, v in data.items()
            if isinstance(v, (int, float)) and not isinstance(v, bool) and v >= 0
        }

#------This Function writes the taken counts of one day---------
    async def save_log(self, day: date, log: Dict[str, int]) -> None:
        await self.store.set(log_key(day), json.dumps(log))

#------This Function records one dose and returns the new count---------
    async def record_dose(self, med_id: str, day: date) -> int:
        log = await self.get_log(day)
        log[med_id] = log.get(med_id, 0) + 1
        await self.save_log(day, log)
        return log[med_id]

#------This Function drops a medication from a day's log---------
    async def remove_medication(self, med_id: str, day: date) -> None:
        log = await self.get_log(day)
        if med_id in log:
            del log[med_id]
            await self.save_log(day, log)
