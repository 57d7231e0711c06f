from fastapi import APIRouter, Depends
from pillguard.core.storage import KeyValueStore, get_store
from pillguard.db.medications import MedicationRepository
from pillguard.models.assistant import ChatRequest, InteractionResult
from pillguard.services.assistant import AssistantService, get_assistant_service

router = APIRouter(prefix="/assistant", tags=["assistant"])


#------This Function checks the stored medications for interactions---------
@router.post("/interactions", response_model=InteractionResult)
async def check_interactions(
    store: KeyValueStore = Depends(get_store),
    service: AssistantService = Depends(get_assistant_service),
):
    meds = await MedicationRepository(store).load()
    return await service.analyze_interactions(meds)


#------This Function answers a chat message---------
@router.post("/chat")
async def chat(
    body: ChatRequest,
    service: AssistantService = Depends(get_assistant_service),
):
    reply = await service.chat(body.history, body.message)
    return {"role": "model", "text": reply}
