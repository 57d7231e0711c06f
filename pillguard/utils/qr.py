import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote
from pillguard.models.medication import DrugForm, Frequency
from pillguard.utils.datetime_parser import normalize_time_of_day

logger = logging.getLogger(__name__)


DEEP_LINK_SCHEME = "pillguard://"
DATA_PARAM = "data="
BASE64_JSON_PREFIX = "eyJ"


def _decode_deep_link(payload: str) -> str:
    encoded = unquote(payload.split(DATA_PARAM, 1)[1])
    if encoded.startswith(BASE64_JSON_PREFIX):
        padded = encoded + "=" * (-len(encoded) % 4)
        encoded = base64.b64decode(padded).decode("utf-8")
    return encoded


def _normalize_form(value: Any) -> DrugForm:
    if not value:
        return DrugForm.TABLET
    try:
        return DrugForm(str(value).upper())
    except ValueError:
        logger.warning(f"Invalid DrugForm '{value}' in QR code. Defaulting to TABLET.")
        return DrugForm.TABLET


def _normalize_frequency(value: Any) -> Optional[Frequency]:
    if not value:
        return None
    wanted = str(value).strip().lower()
    for frequency in Frequency:
        if frequency.value.lower() == wanted or frequency.name.lower() == wanted:
            return frequency
    logger.warning(f"Unknown frequency '{value}' in QR code, leaving it unset")
    return None


#------This Function parses a scanned QR payload into medication fields---------
def parse_qr_payload(payload: str) -> Optional[Dict[str, Any]]:
    if not payload:
        return None

    text = payload.strip()
    try:
        if DEEP_LINK_SCHEME in text and DATA_PARAM in text:
            text = _decode_deep_link(text)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    if not (text.startswith("{") and text.endswith("}")):
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict) or not data.get("name"):
        return None

    data["form"] = _normalize_form(data.get("form"))

    frequency = _normalize_frequency(data.pop("frequency", None))
    if frequency is not None:
        data["frequency"] = frequency

    primary = data.pop("time", None) or data.pop("primary_time", None)
    if primary:
        normalized = normalize_time_of_day(str(primary))
        if normalized:
            data["primary_time"] = normalized

    times = data.pop("times", None) or data.pop("scheduled_times", None)
    if isinstance(times, list):
        data["scheduled_times"] = [
            t for t in (normalize_time_of_day(str(raw)) for raw in times) if t
        ]

    return data
