from pydantic import BaseModel
from typing import Optional


class DrugSearchResult(BaseModel):
    name: str
    rxcui: Optional[str] = None


class DrugDetails(BaseModel):
    brand_name: str = ""
    indications: str = ""
    warnings: str = ""
    reactions: str = ""
