from typing import Optional
from fastapi import APIRouter, Depends, Query
from pillguard.core.clock import DeviceClock, get_device_clock
from pillguard.core.config import settings
from pillguard.core.storage import KeyValueStore, get_store
from pillguard.db.medications import MedicationRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.models.adherence import AdherenceStats
from pillguard.services.adherence import adherence_stats

router = APIRouter(prefix="/adherence", tags=["adherence"])


#------This Function returns adherence stats for the lookback window---------
@router.get("/", response_model=AdherenceStats)
async def get_adherence(
    days: Optional[int] = Query(None, ge=1, le=365),
    store: KeyValueStore = Depends(get_store),
    clock: DeviceClock = Depends(get_device_clock),
):
    meds = await MedicationRepository(store).load()
    return await adherence_stats(
        meds,
        days or settings.adherence_lookback_days,
        TakenLogRepository(store),
        clock.today(),
    )
