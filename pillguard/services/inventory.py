import logging
import math
import re
from datetime import date, timedelta
from typing import Dict, Optional
from ..models.medication import DrugForm, Frequency, Medication

logger = logging.getLogger(__name__)


DAYS_LEFT_SENTINEL = 999
REFILL_HORIZON_DAYS = 365

# As Needed is an estimate; interval dosing has no fixed daily count
DAILY_USAGE: Dict[Frequency, float] = {
    Frequency.DAILY: 1,
    Frequency.TWICE_DAILY: 2,
    Frequency.WEEKLY: 1 / 7,
    Frequency.AS_NEEDED: 0.5,
    Frequency.EVERY_X_HOURS: 1,
}

# True when the dosage number is the amount per dose rather than the strength
MEASURED_FORMS: Dict[DrugForm, bool] = {
    DrugForm.LIQUID: True,
    DrugForm.INJECTION: True,
    DrugForm.CREAM: True,
    DrugForm.TABLET: False,
    DrugForm.CAPSULE: False,
}

NUMBER_PATTERN = re.compile(r'\d+(?:\.\d+)?')
UNIT_WORD_PATTERN = re.compile(r'(tablet|capsule|pill)', re.IGNORECASE)


#------This Function returns the expected units used per day---------
def daily_usage(frequency: Frequency) -> float:
    return DAILY_USAGE[frequency]


#------This Function returns how many days the stock lasts---------
def days_left(stock: float, frequency: Frequency) -> int:
    usage = daily_usage(frequency)
    if usage == 0:
        return DAYS_LEFT_SENTINEL
    return math.floor(stock / usage)


#------This Function predicts the date the stock runs out---------
def predicted_refill_date(stock: float, frequency: Frequency, today: date) -> Optional[date]:
    remaining = days_left(stock, frequency)
    if remaining > REFILL_HORIZON_DAYS:
        return None
    return today + timedelta(days=remaining)


#------This Function works out the units consumed by one dose---------
def dose_amount(medication: Medication) -> float:
    dosage = medication.dosage or ""
    match = NUMBER_PATTERN.search(dosage)
    if not match:
        return 1

    amount = float(match.group(0))
    if amount <= 0:
        logger.warning(f"Non-positive dose '{dosage}' for {medication.id}, deducting 1 unit")
        return 1

    if MEASURED_FORMS[medication.form]:
        return amount
    # "500mg" is a strength, "2 tablets" is a count
    if UNIT_WORD_PATTERN.search(dosage):
        return amount
    return 1


#------This Function returns the stock left after one dose---------
def decrement_stock(medication: Medication) -> float:
    return max(0, medication.stock - dose_amount(medication))


#------This Function tells whether stock reached the refill threshold---------
def needs_refill(medication: Medication) -> bool:
    return medication.stock <= medication.refill_threshold
