from fastapi import APIRouter, Depends
from pillguard.core.clock import DeviceClock, get_device_clock
from pillguard.core.storage import KeyValueStore, get_store
from pillguard.db.medications import MedicationRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.db.timezone_tracker import TimezoneTracker
from pillguard.services.display import schedule_summary

router = APIRouter(prefix="/schedule", tags=["schedule"])


#------This Function lists upcoming doses in due order---------
@router.get("/")
async def upcoming_doses(
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    now = clock.now()
    meds = await MedicationRepository(store).load()
    taken_log = await TakenLogRepository(store).get_log(now.date())

    entries = []
    for med in meds:
        summary = schedule_summary(med, taken_log.get(med.id, 0), now, clock.zone)
        entries.append((med, summary))
    # unscheduled medications go last
    entries.sort(key=lambda e: (e[1].next_occurrence is None, e[1].next_occurrence or now))

    return [
        {
            "medication_id": med.id,
            "name": med.name,
            "dosage": med.dosage,
            "taken_today": taken_log.get(med.id, 0),
            **summary.model_dump(mode="json"),
        }
        for med, summary in entries
    ]


#------This Function reports the device timezone and whether it changed---------
@router.get("/timezone")
async def timezone_status(
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    changed = await TimezoneTracker(store).check_and_update(clock.zone)
    return {"device_timezone": clock.zone, "changed": changed}
