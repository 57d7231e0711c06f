import pytz
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
from pillguard.utils.datetime_parser import (
    format_time_of_day,
    normalize_time_of_day,
    parse_time_of_day,
)


MAX_NAME_LENGTH = 200
MAX_DOSAGE_LENGTH = 100
MAX_NOTES_LENGTH = 500
MAX_SCHEDULE_TIMES = 10


class Frequency(str, Enum):
    DAILY = "Daily"
    TWICE_DAILY = "Twice Daily"
    WEEKLY = "Weekly"
    AS_NEEDED = "As Needed"
    EVERY_X_HOURS = "Every X Hours"


class DrugForm(str, Enum):
    TABLET = "TABLET"
    CAPSULE = "CAPSULE"
    LIQUID = "LIQUID"
    INJECTION = "INJECTION"
    CREAM = "CREAM"


def _canonical_time(value: str) -> str:
    hour, minute = parse_time_of_day(value)
    return format_time_of_day(hour, minute)


def _check_timezone(value: Optional[str]) -> Optional[str]:
    if value and value not in pytz.all_timezones_set:
        raise ValueError(f'Unknown timezone: {value}')
    return value


class Medication(BaseModel):
    id: str
    name: str
    canonical_name: Optional[str] = None
    rxcui: Optional[str] = None
    form: DrugForm = DrugForm.TABLET
    dosage: str = ""
    frequency: Frequency = Frequency.DAILY
    scheduled_times: List[str] = Field(default_factory=list)
    primary_time: Optional[str] = None
    interval_hours: Optional[int] = Field(default=None, gt=0)
    last_taken_at: Optional[datetime] = None
    last_notified_at: Optional[datetime] = None
    origin_timezone: Optional[str] = None
    stock: float = Field(default=0, ge=0)
    refill_threshold: float = Field(default=0, ge=0)
    notes: str = ""
    color: str = "bg-blue-500"
    pharmacy_contact: Optional[str] = None

    @field_validator('scheduled_times')
    @classmethod
    def validate_scheduled_times(cls, v: List[str]) -> List[str]:
        if len(v) > MAX_SCHEDULE_TIMES:
            raise ValueError(f'Cannot have more than {MAX_SCHEDULE_TIMES} schedule times')
        return [_canonical_time(t) for t in v]

    @field_validator('primary_time')
    @classmethod
    def validate_primary_time(cls, v: Optional[str]) -> Optional[str]:
        return _canonical_time(v) if v else None

    @field_validator('origin_timezone')
    @classmethod
    def validate_origin_timezone(cls, v: Optional[str]) -> Optional[str]:
        return _check_timezone(v)

    @field_validator('last_taken_at', 'last_notified_at')
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return pytz.utc.localize(v)
        return v

    @model_validator(mode='after')
    def check_frequency_shape(self) -> 'Medication':
        if self.frequency == Frequency.EVERY_X_HOURS:
            if not self.interval_hours:
                raise ValueError('interval_hours is required for Every X Hours dosing')
            if not self.primary_time and self.scheduled_times:
                self.primary_time = self.scheduled_times[0]
            self.scheduled_times = []
            return self

        if self.frequency == Frequency.TWICE_DAILY:
            if len(self.scheduled_times) != 2:
                raise ValueError('Twice Daily dosing needs exactly two schedule times')
            self.scheduled_times = sorted(self.scheduled_times)

        if not self.primary_time and self.scheduled_times:
            self.primary_time = self.scheduled_times[0]
        return self


def _normalize_times(v: List[str]) -> List[str]:
    if len(v) > MAX_SCHEDULE_TIMES:
        raise ValueError(f'Cannot have more than {MAX_SCHEDULE_TIMES} schedule times')
    normalized = []
    for raw in v:
        value = normalize_time_of_day(raw)
        if value is None:
            raise ValueError(f'Invalid time format: {raw}. Use HH:MM format.')
        normalized.append(value)
    return normalized


class MedCreate(BaseModel):
    name: str
    canonical_name: Optional[str] = None
    rxcui: Optional[str] = None
    form: DrugForm = DrugForm.TABLET
    dosage: str = ""
    frequency: Frequency = Frequency.DAILY
    scheduled_times: List[str] = []
    primary_time: Optional[str] = None
    interval_hours: Optional[int] = Field(default=None, gt=0)
    origin_timezone: Optional[str] = None
    stock: float = Field(default=30, ge=0)
    refill_threshold: float = Field(default=7, ge=0)
    notes: str = ""
    color: str = "bg-blue-500"
    pharmacy_contact: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Medication name cannot be empty')
        if len(v) > MAX_NAME_LENGTH:
            raise ValueError(f'Medication name cannot exceed {MAX_NAME_LENGTH} characters')
        return v.strip()

    @field_validator('dosage')
    @classmethod
    def validate_dosage(cls, v: str) -> str:
        if v and len(v) > MAX_DOSAGE_LENGTH:
            raise ValueError(f'Dosage cannot exceed {MAX_DOSAGE_LENGTH} characters')
        return v.strip() if v else ""

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, v: str) -> str:
        if v and len(v) > MAX_NOTES_LENGTH:
            raise ValueError(f'Notes cannot exceed {MAX_NOTES_LENGTH} characters')
        return v.strip() if v else ""

    @field_validator('scheduled_times')
    @classmethod
    def validate_scheduled_times(cls, v: List[str]) -> List[str]:
        return _normalize_times(v)

    @field_validator('primary_time')
    @classmethod
    def validate_primary_time(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return _normalize_times([v])[0]

    @field_validator('origin_timezone')
    @classmethod
    def validate_origin_timezone(cls, v: Optional[str]) -> Optional[str]:
        return _check_timezone(v)


class MedUpdate(BaseModel):
    name: Optional[str] = None
    canonical_name: Optional[str] = None
    rxcui: Optional[str] = None
    form: Optional[DrugForm] = None
    dosage: Optional[str] = None
    frequency: Optional[Frequency] = None
    scheduled_times: Optional[List[str]] = None
    primary_time: Optional[str] = None
    interval_hours: Optional[int] = Field(default=None, gt=0)
    stock: Optional[float] = Field(default=None, ge=0)
    refill_threshold: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    color: Optional[str] = None
    pharmacy_contact: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            if not v.strip():
                raise ValueError('Medication name cannot be empty')
            if len(v) > MAX_NAME_LENGTH:
                raise ValueError(f'Medication name cannot exceed {MAX_NAME_LENGTH} characters')
            return v.strip()
        return v

    @field_validator('scheduled_times')
    @classmethod
    def validate_scheduled_times(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return _normalize_times(v)

    @field_validator('primary_time')
    @classmethod
    def validate_primary_time(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return v
        return _normalize_times([v])[0]
