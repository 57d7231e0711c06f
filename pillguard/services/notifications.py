from typing import List, Optional, Dict, Any
from firebase_admin import messaging
from pillguard.core.config import settings
from pillguard.core.firebase import firebase_ready
import logging

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, tokens: Optional[List[str]] = None):
        self._tokens = tokens

    @property
    def tokens(self) -> List[str]:
        return self._tokens if self._tokens is not None else settings.fcm_tokens

#------This Function sends notification---------
    async def send_notification(
        self,
        fcm_token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:

            if data:
                data = {k: str(v) for k, v in data.items()}

            message = messaging.Message(
                notification=messaging.Notification(
                    title=title,
                    body=body,
                ),
                data=data or {},
                token=fcm_token,
                android=messaging.AndroidConfig(
                    priority="high",
                    notification=messaging.AndroidNotification(
                        sound="default",
                        priority="max",
                        vibrate_timings_millis=[0, 500, 200, 500],
                        channel_id="default",
                    ),
                ),
                apns=messaging.APNSConfig(
                    headers={"apns-priority": "10"},
                    payload=messaging.APNSPayload(
                        aps=messaging.Aps(
                            sound="default",
                        ),
                    ),
                ),
            )

            messaging.send(message)
            logger.info(f"Successfully sent notification to token {fcm_token[:10]}...")
            return True

        except messaging.UnregisteredError:
            logger.warning(f"Token {fcm_token[:10]}... is invalid or expired")
            return False
        except Exception as e:
            logger.error(f"Failed to send notification: {str(e)}")
            return False

#------This Function sends notification to every registered device---------
    async def notify_devices(
        self,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> int:
        if not firebase_ready():
            logger.info(f"Push disabled, notification not sent: {title} - {body}")
            return 0
        if not self.tokens:
            logger.warning("No FCM device tokens configured")
            return 0

        success_count = 0
        for token in self.tokens:
            if await self.send_notification(token, title, body, data):
                success_count += 1
        return success_count

#------This Function sends medication reminder---------
    async def send_medication_reminder(
        self,
        title: str,
        body: str,
        medication_id: str,
    ) -> int:
        return await self.notify_devices(
            title=title,
            body=body,
            data={
                "type": "medication",
                "medication_id": medication_id,
            },
        )

#------This Function sends refill warning---------
    async def send_refill_warning(
        self,
        medication_name: str,
        medication_id: str,
        stock: float,
    ) -> int:
        return await self.notify_devices(
            title="Refill Warning",
            body=f"Your {medication_name} stock is low ({stock:g} left).",
            data={
                "type": "refill",
                "medication_id": medication_id,
            },
        )



notification_service = NotificationService()


#------This Function returns the notification service dependency---------
def get_notification_service() -> NotificationService:
    return notification_service
