import asyncio
import math
import logging
from datetime import date, timedelta
from typing import Dict, List
from ..db.taken_log import TakenLogRepository
from ..models.adherence import AdherenceStats
from ..models.medication import Frequency, Medication

logger = logging.getLogger(__name__)


# As Needed and Weekly have no fixed daily expectation and are left out
EXPECTED_DAILY_DOSES: Dict[Frequency, int] = {
    Frequency.DAILY: 1,
    Frequency.TWICE_DAILY: 2,
    Frequency.EVERY_X_HOURS: 1,
    Frequency.WEEKLY: 0,
    Frequency.AS_NEEDED: 0,
}


#------This Function returns how many doses a day a medication expects---------
def expected_daily_doses(frequency: Frequency) -> int:
    return EXPECTED_DAILY_DOSES[frequency]


#------This Function lists the days of the lookback window---------
def lookback_days(today: date, days: int) -> List[date]:
    return [today - timedelta(days=offset) for offset in range(max(0, days))]


#------This Function scores logged doses against expected doses---------
def score_logs(medications: List[Medication], logs: List[Dict[str, int]]) -> AdherenceStats:
    total_scheduled = 0
    total_taken = 0

    for log in logs:
        for med in medications:
            expected = expected_daily_doses(med.frequency)
            if expected == 0:
                continue
            total_scheduled += expected
            total_taken += min(max(0, log.get(med.id, 0)), expected)

    if total_scheduled == 0:
        rate = 100
    else:
        rate = math.floor(100 * total_taken / total_scheduled + 0.5)
    return AdherenceStats(rate=rate, total_taken=total_taken, total_scheduled=total_scheduled)


#------This Function computes the adherence rate over a rolling window---------
async def adherence_stats(
    medications: List[Medication],
    days: int,
    taken_logs: TakenLogRepository,
    today: date,
) -> AdherenceStats:
    window = lookback_days(today, days)
    results = await asyncio.gather(
        *(taken_logs.get_log(day) for day in window), return_exceptions=True
    )

    logs = []
    for day, result in zip(window, results):
        if isinstance(result, Exception):
            logger.warning(f"Could not read taken log for {day.isoformat()}: {result}")
            logs.append({})
        else:
            logs.append(result)

    stats = score_logs(medications, logs)
    logger.debug(
        f"Adherence over {days} days: {stats.rate}% ({stats.total_taken}/{stats.total_scheduled})"
    )
    return stats
