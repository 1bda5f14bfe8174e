import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from brief_relay.errors import TelegramDeliveryError
from brief_relay.services.messaging.telegram_delivery_service import TelegramDeliveryService
from brief_relay.utils.markdown import escape_markdown_v2
from brief_relay.utils.request_validators import SubmissionRequest

logger = logging.getLogger(__name__)

MESSAGE_TITLE = "📩 *Новый бриф с лендинга*"
NAME_LABEL = "*Имя:*"
CONTACT_LABEL = "*Контакт:*"
DESCRIPTION_LABEL = "*Задача:*"


@dataclass(frozen=True)
class DeliveryOutcome:
    chat_id: str
    result: Optional[Any] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class SubmissionRelayService:
    """
    Formats a submission and delivers it to every configured admin chat

    Deliveries run one after another in recipient order. A failure for one
    chat is logged and recorded, then the loop moves on.
    """

    def __init__(self, delivery_service: TelegramDeliveryService, admin_ids: Sequence[str]):
        self.delivery_service = delivery_service
        self.admin_ids = tuple(admin_ids)

    def format_message(self, submission: SubmissionRequest) -> str:
        return (
            f"{MESSAGE_TITLE}\n"
            f"{NAME_LABEL} {escape_markdown_v2(submission.name)}\n"
            f"{CONTACT_LABEL} {escape_markdown_v2(submission.contact)}\n"
            f"{DESCRIPTION_LABEL}\n{escape_markdown_v2(submission.description)}"
        )

    def relay(self, submission: SubmissionRequest) -> List[DeliveryOutcome]:
        message = self.format_message(submission)
        outcomes = []

        for chat_id in self.admin_ids:
            try:
                result = self.delivery_service.send_message(chat_id, message)
                outcomes.append(DeliveryOutcome(chat_id=chat_id, result=result))
            except TelegramDeliveryError as e:
                logger.error(f"❌ Failed to send to {chat_id}: {e}")
                outcomes.append(DeliveryOutcome(chat_id=chat_id, error=str(e)))
            except Exception as e:
                logger.exception(f"❌ Unexpected error sending to {chat_id}")
                outcomes.append(DeliveryOutcome(chat_id=chat_id, error=f"{type(e).__name__}: {e}"))

        sent = self.count_delivered(outcomes)
        logger.info(f"📨 Submission relayed to {sent}/{len(self.admin_ids)} recipients")
        return outcomes

    @staticmethod
    def count_delivered(outcomes: Sequence[DeliveryOutcome]) -> int:
        return sum(1 for outcome in outcomes if outcome.succeeded)
