from pydantic import BaseModel, Field
from typing import Dict
from datetime import datetime
import pytz


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


class Reminder(BaseModel):
    medication_id: str
    title: str
    body: str
    fire_at: datetime
    data: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
