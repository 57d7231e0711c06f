from fastapi import APIRouter, Depends, HTTPException
from typing import List
from pillguard.core.clock import DeviceClock, get_device_clock
from pillguard.core.storage import KeyValueStore, get_store
from pillguard.db.medications import MedicationRepository
from pillguard.db.reminders import ReminderRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.models.reminder import Reminder
from pillguard.services.reminders import ReminderScheduler

router = APIRouter(prefix="/reminders", tags=["reminders"])


#------This Function lists pending reminders---------
@router.get("/", response_model=List[Reminder])
async def list_reminders(store: KeyValueStore = Depends(get_store)):
    return await ReminderScheduler(ReminderRepository(store)).pending()


#------This Function arms the reminder of a medication---------
@router.post("/{medication_id}")
async def arm_reminder(
    medication_id: str,
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    med = await MedicationRepository(store).get(medication_id)
    if not med:
        raise HTTPException(status_code=404, detail="Medication not found")
    taken_log = await TakenLogRepository(store).get_log(clock.today())
    reminder = await ReminderScheduler(ReminderRepository(store)).schedule_reminder(
        med, taken_log.get(med.id, 0), clock.now(), clock.zone
    )
    if reminder is None:
        return {"status": "not_scheduled", "medication_id": medication_id}
    return {"status": "scheduled", "reminder": reminder.model_dump(mode="json")}


#------This Function cancels the reminder of a medication---------
@router.delete("/{medication_id}")
async def cancel_reminder(medication_id: str, store: KeyValueStore = Depends(get_store)):
    cancelled = await ReminderScheduler(ReminderRepository(store)).cancel_reminder(medication_id)
    if not cancelled:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"status": "cancelled", "medication_id": medication_id}
