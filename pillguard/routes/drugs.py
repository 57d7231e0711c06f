import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List
from pillguard.models.drug import DrugDetails, DrugSearchResult
from pillguard.services.drug_label import DrugLabelService, get_drug_label_service
from pillguard.services.drug_search import DrugSearchService, get_drug_search_service
from pillguard.utils.qr import parse_qr_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/drugs", tags=["drugs"])


class ScanRequest(BaseModel):
    payload: str


#------This Function searches drug names---------
@router.get("/search", response_model=List[DrugSearchResult])
async def search_drugs(
    q: str = Query("", max_length=100),
    service: DrugSearchService = Depends(get_drug_search_service),
):
    return await service.search(q)


#------This Function gets drug label details---------
@router.get("/details", response_model=DrugDetails)
async def drug_details(
    name: str = Query(..., min_length=1, max_length=200),
    service: DrugLabelService = Depends(get_drug_label_service),
):
    details = await service.get_details(name)
    if details is None:
        raise HTTPException(status_code=404, detail="Drug information not found")
    return details


#------This Function parses a scanned QR code---------
@router.post("/scan")
async def scan_code(body: ScanRequest):
    data = parse_qr_payload(body.payload)
    if data is None:
        logger.info("Rejected unreadable QR payload")
        raise HTTPException(status_code=400, detail="Invalid QR Code")
    return data
