import json
import logging
from typing import List, Optional
from pydantic import ValidationError
from pillguard.core.storage import KeyValueStore
from pillguard.models.medication import Frequency, Medication

logger = logging.getLogger(__name__)


STORAGE_KEY = "pillguard_medications_v1"


class MedicationRepository:

    def __init__(self, store: KeyValueStore):
        self.store = store

#------This Function loads all medications---------
    async def load(self) -> List[Medication]:
        raw = await self.store.get(STORAGE_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load medications: {e}")
            return []

        if not isinstance(records, list):
            logger.error("Failed to load medications: stored value is not a list")
            return []

        medications = []
        for record in records:
            try:
                medications.append(Medication.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid medication record: {e}")
        return medications

#------This Function saves all medications---------
    async def save(self, medications: List[Medication]) -> None:
        payload = [m.model_dump(mode="json") for m in medications]
        await self.store.set(STORAGE_KEY, json.dumps(payload))

#------This Function gets one medication---------
    async def get(self, med_id: str) -> Optional[Medication]:
        for med in await self.load():
            if med.id == med_id:
                return med
        return None

#------This Function inserts or replaces one medication---------
    async def upsert(self, medication: Medication) -> Medication:
        medications = await self.load()
        for index, med in enumerate(medications):
            if med.id == medication.id:
                medications[index] = medication
                break
        else:
            medications.append(medication)
        await self.save(medications)
        return medication

#------This Function deletes one medication---------
    async def delete(self, med_id: str) -> bool:
        medications = await self.load()
        remaining = [m for m in medications if m.id != med_id]
        if len(remaining) == len(medications):
            return False
        await self.save(remaining)
        return True

#------This Function seeds demo data into an empty store---------
    async def seed_initial_data(self, device_zone: str) -> List[Medication]:
        existing = await self.load()
        if existing:
            return existing

        seeds = [
            Medication(
                id="1",
                name="Lisinopril",
                canonical_name="Lisinopril",
                dosage="10mg",
                frequency=Frequency.DAILY,
                scheduled_times=["08:00"],
                origin_timezone=device_zone,
                color="bg-blue-500",
                stock=5,
                refill_threshold=7,
            ),
            Medication(
                id="2",
                name="Metformin",
                canonical_name="Metformin",
                dosage="500mg",
                frequency=Frequency.TWICE_DAILY,
                scheduled_times=["08:00", "20:00"],
                origin_timezone=device_zone,
                notes="Take with food",
                color="bg-emerald-500",
                stock=56,
                refill_threshold=10,
            ),
            Medication(
                id="3",
                name="Atorvastatin",
                canonical_name="Atorvastatin",
                dosage="20mg",
                frequency=Frequency.DAILY,
                scheduled_times=["20:00"],
                origin_timezone=device_zone,
                color="bg-purple-500",
                stock=30,
                refill_threshold=7,
            ),
        ]
        await self.save(seeds)
        logger.info(f"Seeded {len(seeds)} demo medications")
        return seeds
