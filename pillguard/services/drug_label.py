import logging
from typing import Optional
import httpx
from pillguard.core.config import settings
from ..models.drug import DrugDetails
from ..utils.cache import LRUCache

logger = logging.getLogger(__name__)


MISSING_FIELD = "Information not available in standard label."


#------This Function strips a display suffix like "(Suspension)" from a name---------
def clean_drug_name(name: str) -> str:
    return name.split("(")[0].strip()


#------This Function maps an openFDA label response to drug details---------
def parse_label_response(data: dict) -> DrugDetails:
    results = data.get("results") or []
    if not results:
        return DrugDetails()

    result = results[0]

    def first(field: str) -> str:
        values = result.get(field)
        return values[0] if values else MISSING_FIELD

    brand_names = (result.get("openfda") or {}).get("brand_name") or []
    return DrugDetails(
        brand_name=brand_names[0] if brand_names else "Unknown",
        indications=first("indications_and_usage"),
        warnings=first("warnings"),
        reactions=first("adverse_reactions"),
    )


class DrugLabelService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, cache_size: Optional[int] = None):
        self._transport = transport
        self.cache = LRUCache(cache_size or settings.drug_cache_size)

#------This Function gets label details for a drug---------
    async def get_details(self, drug_name: str) -> Optional[DrugDetails]:
        if not drug_name:
            return None

        name = clean_drug_name(drug_name)
        cache_key = f"openfda_{name.lower()}"
        if self.cache.has(cache_key):
            return self.cache.get(cache_key)

        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, transport=self._transport
            ) as client:
                response = await self._query(client, "openfda.brand_name", name)
                if response.status_code != 200:
                    response = await self._query(client, "openfda.generic_name", name)
                    if response.status_code != 200:
                        logger.info(f"No FDA label found for {name}")
                        return None
                details = parse_label_response(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OpenFDA fetch error: {e}")
            return None

        self.cache.set(cache_key, details)
        return details

    async def _query(self, client: httpx.AsyncClient, field: str, name: str) -> httpx.Response:
        return await client.get(
            settings.drug_label_url,
            params={"search": f'{field}:"{name}"', "limit": 1},
        )



drug_label_service = DrugLabelService()


#------This Function returns the drug label service dependency---------
def get_drug_label_service() -> DrugLabelService:
    return drug_label_service
