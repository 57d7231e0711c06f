import logging
from pillguard.core.storage import KeyValueStore

logger = logging.getLogger(__name__)


LAST_TIMEZONE_KEY = "pillguard_last_timezone"


class TimezoneTracker:

    def __init__(self, store: KeyValueStore):
        self.store = store

#------This Function records the device zone and reports a change---------
    async def check_and_update(self, current_zone: str) -> bool:
        last_zone = await self.store.get(LAST_TIMEZONE_KEY)
        changed = bool(last_zone) and last_zone != current_zone
        if changed:
            logger.info(f"Device timezone changed from {last_zone} to {current_zone}")
        await self.store.set(LAST_TIMEZONE_KEY, current_zone)
        return changed
