from pydantic import BaseModel


class AdherenceStats(BaseModel):
    rate: int = 100
    total_taken: int = 0
    total_scheduled: int = 0
