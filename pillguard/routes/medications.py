import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from typing import Dict, List
from pillguard.core.clock import DeviceClock, get_device_clock
from pillguard.core.config import settings
from pillguard.core.storage import KeyValueStore, get_store
from pillguard.db.medications import MedicationRepository
from pillguard.db.reminders import ReminderRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.models.medication import MedCreate, MedUpdate, Medication
from pillguard.services.display import schedule_summary
from pillguard.services.inventory import (
    days_left,
    decrement_stock,
    needs_refill,
    predicted_refill_date,
)
from pillguard.services.notifications import NotificationService, get_notification_service
from pillguard.services.reminders import ReminderScheduler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/medications", tags=["medications"])


#------This Function lists medications---------
@router.get("/")
async def list_medications(
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    try:
        meds = await MedicationRepository(store).load()
        taken_log = await TakenLogRepository(store).get_log(clock.today())
        return [_serialize(m, taken_log, clock) for m in meds]
    except Exception as e:
        logger.error(f"Failed to list medications: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to retrieve medications")


#------This Function gets medication---------
@router.get("/{med_id}")
async def get_medication(
    med_id: str,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    med = await _get_or_404(store, med_id)
    taken_log = await TakenLogRepository(store).get_log(clock.today())
    return _serialize(med, taken_log, clock)


#------This Function creates medication---------
@router.post("/")
async def create_medication(
    body: MedCreate,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    fields = body.model_dump()
    fields["origin_timezone"] = body.origin_timezone or clock.zone
    med = _build(id=uuid.uuid4().hex, **fields)

    try:
        await MedicationRepository(store).upsert(med)
        taken_log = await TakenLogRepository(store).get_log(clock.today())
        await _scheduler(store).schedule_reminder(med, taken_log.get(med.id, 0), clock.now(), clock.zone)
        logger.info(f"Created medication {med.id} ({med.name})")
        return _serialize(med, taken_log, clock)
    except Exception as e:
        logger.error(f"Failed to create medication: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create medication")


#------This Function updates medication---------
@router.put("/{med_id}")
async def update_medication(
    med_id: str,
    body: MedUpdate,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    med = await _get_or_404(store, med_id)
    changes = body.model_dump(exclude_none=True)
    fields = med.model_dump()
    if "scheduled_times" in changes and "primary_time" not in changes:
        # let the model pick the start time from the new schedule
        fields["primary_time"] = None
    fields.update(changes)
    updated = _build(**fields)

    try:
        await MedicationRepository(store).upsert(updated)
        taken_log = await TakenLogRepository(store).get_log(clock.today())
        await _scheduler(store).schedule_reminder(
            updated, taken_log.get(med_id, 0), clock.now(), clock.zone
        )
        logger.info(f"Updated medication {med_id}")
        return _serialize(updated, taken_log, clock)
    except Exception as e:
        logger.error(f"Failed to update medication {med_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update medication")


#------This Function marks medication as taken---------
@router.post("/{med_id}/take")
async def mark_taken(
    med_id: str,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
    notifier: NotificationService = Depends(get_notification_service),
):
    med = await _get_or_404(store, med_id)
    now = clock.now()

    try:
        taken_logs = TakenLogRepository(store)
        taken_count = await taken_logs.record_dose(med_id, now.date())

        updated = med.model_copy(update={"stock": decrement_stock(med), "last_taken_at": now})
        if needs_refill(updated):
            await notifier.send_refill_warning(updated.name, updated.id, updated.stock)

        await MedicationRepository(store).upsert(updated)
        await ReminderScheduler(ReminderRepository(store), notifier).schedule_reminder(
            updated, taken_count, now, clock.zone
        )
        logger.info(f"Marked medication {med_id} as taken ({taken_count} today)")
        return _serialize(updated, {med_id: taken_count}, clock)
    except Exception as e:
        logger.error(f"Failed to mark medication {med_id} as taken: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to mark medication as taken")


#------This Function refills medication stock---------
@router.post("/{med_id}/refill")
async def refill_medication(
    med_id: str,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    med = await _get_or_404(store, med_id)
    updated = med.model_copy(update={"stock": med.stock + settings.refill_amount})
    await MedicationRepository(store).upsert(updated)
    logger.info(f"Refilled medication {med_id} to {updated.stock:g}")
    taken_log = await TakenLogRepository(store).get_log(clock.today())
    return _serialize(updated, taken_log, clock)


#------This Function deletes medication---------
@router.delete("/{med_id}")
async def delete_medication(
    med_id: str,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    deleted = await MedicationRepository(store).delete(med_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Medication not found")
    await TakenLogRepository(store).remove_medication(med_id, clock.today())
    await _scheduler(store).cancel_reminder(med_id)
    logger.info(f"Deleted medication {med_id}")
    return {"status": "ok"}


async def _get_or_404(store: KeyValueStore, med_id: str) -> Medication:
    med = await MedicationRepository(store).get(med_id)
    if not med:
        raise HTTPException(status_code=404, detail="Medication not found")
    return med


def _build(**fields) -> Medication:
    try:
        return Medication(**fields)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[err["msg"] for err in e.errors()],
        )


def _scheduler(store: KeyValueStore) -> ReminderScheduler:
    return ReminderScheduler(ReminderRepository(store))


def _serialize(med: Medication, taken_log: Dict[str, int], clock: DeviceClock) -> dict:
    now = clock.now()
    taken_today = taken_log.get(med.id, 0)
    refill_date = predicted_refill_date(med.stock, med.frequency, now.date())
    return {
        **med.model_dump(mode="json"),
        "taken_today": taken_today,
        "schedule": schedule_summary(med, taken_today, now, clock.zone).model_dump(mode="json"),
        "inventory": {
            "days_left": days_left(med.stock, med.frequency),
            "predicted_refill_date": refill_date.isoformat() if refill_date else None,
            "needs_refill": needs_refill(med),
        },
    }
