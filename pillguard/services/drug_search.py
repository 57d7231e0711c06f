import logging
from typing import List, Optional
import httpx
from pillguard.core.config import settings
from ..models.drug import DrugSearchResult

logger = logging.getLogger(__name__)


MIN_QUERY_LENGTH = 2
MAX_RESULTS = 20

COMMON_DRUGS = [
    DrugSearchResult(name="Lisinopril", rxcui="29046"),
    DrugSearchResult(name="Atorvastatin", rxcui="83367"),
    DrugSearchResult(name="Metformin", rxcui="6809"),
    DrugSearchResult(name="Amlodipine", rxcui="17767"),
    DrugSearchResult(name="Levothyroxine", rxcui="10582"),
    DrugSearchResult(name="Omeprazole", rxcui="7646"),
    DrugSearchResult(name="Losartan", rxcui="52486"),
    DrugSearchResult(name="Gabapentin", rxcui="25480"),
    DrugSearchResult(name="Hydrochlorothiazide", rxcui="5487"),
    DrugSearchResult(name="Sertraline", rxcui="36437"),
    DrugSearchResult(name="Simvastatin", rxcui="36567"),
    DrugSearchResult(name="Ibuprofen", rxcui="5640"),
    DrugSearchResult(name="Acetaminophen", rxcui="161"),
    DrugSearchResult(name="Albuterol", rxcui="435"),
    DrugSearchResult(name="Cetirizine", rxcui="20610"),
]


#------This Function filters the bundled list of common drugs---------
def fallback_drugs(query: str) -> List[DrugSearchResult]:
    needle = query.lower()
    return [d for d in COMMON_DRUGS if needle in d.name.lower()]


class DrugSearchService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

#------This Function searches drug names on RxTerms---------
    async def search(self, query: str) -> List[DrugSearchResult]:
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(
                    settings.drug_search_url,
                    params={"terms": query, "ef": "RXCUIS", "maxList": MAX_RESULTS},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Drug search API error: {e}")
            return fallback_drugs(query)

        return self._parse(data)

    def _parse(self, data) -> List[DrugSearchResult]:
        if not isinstance(data, list) or len(data) < 2 or not data[1]:
            return []

        names = data[1]
        extras = data[2] if len(data) > 2 and isinstance(data[2], dict) else {}
        rxcui_lists = extras.get("RXCUIS") or []

        results = []
        for index, name in enumerate(names):
            rxcuis = rxcui_lists[index] if index < len(rxcui_lists) else None
            results.append(
                DrugSearchResult(name=name, rxcui=rxcuis[0] if rxcuis else None)
            )
        return results



drug_search_service = DrugSearchService()


#------This Function returns the drug search service dependency---------
def get_drug_search_service() -> DrugSearchService:
    return drug_search_service
