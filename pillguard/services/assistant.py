import json
import logging
from typing import List, Optional
import httpx
from pydantic import ValidationError
from pillguard.core.config import settings
from ..models.assistant import ChatMessage, ChatRole, InteractionResult
from ..models.medication import Medication

logger = logging.getLogger(__name__)


GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"

NOT_ENOUGH_MEDICATIONS = InteractionResult(
    summary="Not enough medications to check for interactions.",
    recommendation="Add more medications to your list to check for potential interactions.",
)

INTERACTIONS_UNAVAILABLE = InteractionResult(
    summary="AI Interaction checking is temporarily unavailable.",
    recommendation="Please check with your healthcare provider.",
)

INTERACTIONS_FAILED = InteractionResult(
    summary="Could not analyze interactions at this time due to a network or service error.",
    recommendation="Please consult your pharmacist or doctor directly.",
)

CHAT_OFFLINE = "I'm sorry, I'm currently offline for maintenance. Please check back later."

CHAT_SYSTEM_PROMPT = (
    "You are PillGuard, a compassionate and knowledgeable medical adherence assistant. "
    "Your goal is to help patients understand their medications, remind them of importance, "
    "and answer general health questions. Always advise users to consult a doctor for "
    "specific medical advice. Be concise and empathetic."
)

INTERACTION_SYSTEM_PROMPT = """You are a clinical pharmacology assistant.
Analyze the given medication list for potential drug-drug interactions.
Focus on clinical relevance but keep language accessible to a patient.

Return ONLY a valid JSON object of this shape:
{
  "has_interaction": true,
  "severity": "none | low | moderate | high",
  "summary": "General summary",
  "recommendation": "General recommendation",
  "interactions": [
    {"med1": "Drug A", "med2": "Drug B", "severity": "low | moderate | high", "description": "..."}
  ]
}"""


class AssistantService:

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.groq_api_key if api_key is None else api_key
        self._transport = transport

#------This Function checks a medication list for interactions---------
    async def analyze_interactions(self, medications: List[Medication]) -> InteractionResult:
        if len(medications) < 2:
            return NOT_ENOUGH_MEDICATIONS.model_copy(deep=True)

        if not self.api_key:
            logger.info("Interaction check skipped: GROQ_API_KEY is not set")
            return INTERACTIONS_UNAVAILABLE.model_copy(deep=True)

        med_list = ", ".join(f"{m.name} ({m.dosage})" if m.dosage else m.name for m in medications)
        content = await self._call_groq_api(
            [
                {"role": "system", "content": INTERACTION_SYSTEM_PROMPT},
                {"role": "user", "content": f"Medications: {med_list}"},
            ],
            temperature=0.2,
            json_mode=True,
        )
        if content is None:
            return INTERACTIONS_FAILED.model_copy(deep=True)

        try:
            return InteractionResult.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse interaction response: {e}")
            return INTERACTIONS_FAILED.model_copy(deep=True)

#------This Function answers a chat message---------
    async def chat(self, history: List[ChatMessage], message: str) -> str:
        if not self.api_key:
            logger.info("Chat skipped: GROQ_API_KEY is not set")
            return CHAT_OFFLINE

        messages = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
        for entry in history:
            if entry.is_error:
                continue
            role = "assistant" if entry.role == ChatRole.MODEL else "user"
            messages.append({"role": role, "content": entry.text})
        messages.append({"role": "user", "content": message})

        content = await self._call_groq_api(messages, temperature=0.7)
        return content if content else CHAT_OFFLINE

#------This Function calls Groq API---------
    async def _call_groq_api(
        self, messages: List[dict], temperature: float, json_mode: bool = False
    ) -> Optional[str]:
        payload = {
            "model": settings.groq_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": 1000,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
                response = await client.post(
                    GROQ_API_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )

                if response.status_code != 200:
                    logger.error(f"Groq API error: {response.status_code} - {response.text}")
                    return None

                result = response.json()
                return result.get("choices", [{}])[0].get("message", {}).get("content")

        except httpx.RequestError as e:
            logger.error(f"HTTP request failed: {e}")
            return None
        except (ValueError, IndexError, AttributeError) as e:
            logger.error(f"Unexpected Groq response: {e}")
            return None



assistant_service = AssistantService()


#------This Function returns the assistant service dependency---------
def get_assistant_service() -> AssistantService:
    return assistant_service
