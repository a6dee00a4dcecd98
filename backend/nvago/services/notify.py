import hashlib
import json
import requests
import logging
import os
import time
from typing import Dict, Any, Optional

from nvago.services.status_workflow import Notification

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES_WEBHOOK = os.getenv("NVAGO_MESSAGES_WEBHOOK_URL", "http://localhost:8001/messages")
DEFAULT_RETRIES = int(os.getenv("NVAGO_NOTIFY_RETRIES", "3"))


class NotificationClient:
    """Delivers customer notifications to the messaging sink over a webhook."""

    def __init__(self, webhook_url: str = None, max_retries: int = None, backoff: float = 0.5):
        self.webhook = webhook_url or DEFAULT_MESSAGES_WEBHOOK
        self.max_retries = max_retries if max_retries is not None else DEFAULT_RETRIES
        self.backoff = backoff
        logger.debug("NotificationClient initialized with webhook=%s max_retries=%s", self.webhook, self.max_retries)

    def build_payload(
        self,
        order_id: int,
        notification: Notification,
        email: Optional[str] = None,
        archive_conversation: bool = False,
    ) -> Dict[str, Any]:
        payload = {
            "order_id": order_id,
            "kind": notification.kind.value,
            "message": notification.message,
            "archive_conversation": archive_conversation,
        }
        if notification.layout_file:
            payload["layout_file"] = notification.layout_file
        if email:
            payload["email"] = email
        return payload

    def idempotency_key(self, payload: Dict[str, Any]) -> str:
        digest = hashlib.sha256(json.dumps(payload, sort_keys=True, default=str).encode("utf-8")).hexdigest()[:16]
        return f"order-{payload['order_id']}-{payload.get('kind', 'message')}-{digest}"

    def send(self, payload: Dict[str, Any]) -> bool:
        headers = {"Content-Type": "application/json"}
        # idempotency key so the sink drops retries of the same notification, not new ones
        if "order_id" in payload:
            headers["Idempotency-Key"] = self.idempotency_key(payload)

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Sending notification attempt=%s url=%s", attempt, self.webhook)
                resp = requests.post(self.webhook, json=payload, timeout=5, headers=headers)
                resp.raise_for_status()
                logger.info("Sent notification order_id=%s kind=%s status=%s",
                            payload.get("order_id"), payload.get("kind"), resp.status_code)
                return True
            except requests.RequestException as e:
                logger.warning("Attempt %s: failed to send notification: %s", attempt, e)
            if attempt < self.max_retries:
                time.sleep(self.backoff * attempt)

        logger.error("All %s attempts to send notification failed for order_id=%s",
                     self.max_retries, payload.get("order_id"))
        return False

    def notify(
        self,
        order_id: int,
        notification: Notification,
        email: Optional[str] = None,
        archive_conversation: bool = False,
    ) -> bool:
        return self.send(self.build_payload(order_id, notification, email, archive_conversation))
