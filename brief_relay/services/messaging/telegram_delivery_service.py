# brief_relay/services/messaging/telegram_delivery_service.py
import logging
from typing import Any, Dict, Optional

import requests

from brief_relay.config import DEFAULT_TELEGRAM_API_BASE
from brief_relay.errors import TelegramDeliveryError

logger = logging.getLogger(__name__)

PARSE_MODE = "MarkdownV2"


class TelegramDeliveryService:
    """
    Sends one message to one chat through the Telegram Bot API.

    A call either returns the provider's result record or raises
    TelegramDeliveryError. There is no retry and no queueing here; the caller
    decides what a failure means.
    """

    def __init__(self, bot_token: Optional[str],
                 api_base: str = DEFAULT_TELEGRAM_API_BASE,
                 timeout: Optional[float] = 10.0):
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base}/bot{self.bot_token}/sendMessage"

    def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        POST sendMessage for a single chat

        Args:
            chat_id: Recipient chat identifier
            text: Already formatted MarkdownV2 text

        Returns:
            The "result" record from the API response

        Raises:
            TelegramDeliveryError: API said ok=false, answered with something
                that is not JSON, or the request never completed
        """
        if not self.bot_token:
            raise TelegramDeliveryError("Telegram bot token is not configured", chat_id=chat_id)

        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": PARSE_MODE,
        }

        try:
            response = requests.post(self.send_message_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            # The URL carries the token, keep it out of the message
            raise TelegramDeliveryError(
                f"Telegram request failed: {type(e).__name__}",
                chat_id=chat_id,
                payload=str(e).replace(str(self.bot_token), "<token>")
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise TelegramDeliveryError(
                f"Telegram API returned non-JSON response (HTTP {response.status_code})",
                chat_id=chat_id,
                payload=response.text[:500]
            ) from e

        if not isinstance(data, dict) or not data.get("ok"):
            raise TelegramDeliveryError(f"Telegram API error: {data}", chat_id=chat_id, payload=data)

        result = data.get("result")
        if isinstance(result, dict):
            logger.debug(f"Delivered to {chat_id}: message_id={result.get('message_id')}")
        return result
