import logging
import os
import firebase_admin
from firebase_admin import credentials
from pillguard.core.config import settings

logger = logging.getLogger(__name__)

_app = None


#------This Function initializes Firebase---------
def init_firebase() -> bool:
    global _app
    if _app:
        return True
    cred_path = settings.firebase_credentials_path
    if not os.path.exists(cred_path):
        logger.warning(
            f"Firebase credentials not found at {cred_path}. Push notifications are disabled."
        )
        return False
    cred = credentials.Certificate(cred_path)
    _app = firebase_admin.initialize_app(cred)
    return True


#------This Function reports whether push delivery is available---------
def firebase_ready() -> bool:
    return _app is not None
