import logging

from brief_relay.config import RelayConfig
from brief_relay.services.messaging.rate_limit_service import RateLimitService
from brief_relay.services.messaging.relay_service import SubmissionRelayService
from brief_relay.services.messaging.telegram_delivery_service import TelegramDeliveryService
from brief_relay.services.redis_storage_manager import RedisStorageManager
from brief_relay.utils.request_validators import validate_submission_request
from brief_relay.utils.response_builder import SubmissionResponseBuilder

logger = logging.getLogger(__name__)


class SubmissionController:
    """
    Controller: Handles HTTP requests and orchestrates services
    Thin layer - delegates business logic to services
    """

    def __init__(self, config: RelayConfig, relay_service=None, rate_limit_service=None):
        self.config = config

        if relay_service is None:
            delivery_service = TelegramDeliveryService(
                bot_token=config.bot_token,
                api_base=config.telegram_api_base,
                timeout=config.telegram_timeout_seconds
            )
            relay_service = SubmissionRelayService(delivery_service, config.admin_ids)
        self.relay_service = relay_service

        if rate_limit_service is None:
            rate_limit_service = RateLimitService(
                storage=RedisStorageManager(redis_url=config.redis_url),
                max_requests=config.rate_limit_max_requests,
                window_seconds=config.rate_limit_window_seconds
            )
        self.rate_limit_service = rate_limit_service
        self.response_builder = SubmissionResponseBuilder()

    def enforce_rate_limit(self, client_key):
        """
        Run before every request. Returns a 429 response to short-circuit
        the request, or None to let it through.
        """
        decision = self.rate_limit_service.check(client_key or "unknown")
        if decision.allowed:
            return None
        return self.response_builder.build_rate_limit_response(retry_after=decision.retry_after)

    def handle_submission(self, request):
        """Handle a landing page brief - orchestrates the flow"""
        try:
            # 1. Input validation (controller responsibility)
            payload = request.get_json() if request.is_json else {}
            validation_result = validate_submission_request(payload)
            if not validation_result.is_valid:
                logger.info(f"Rejected submission, missing: {', '.join(validation_result.missing_fields)}")
                return self.response_builder.build_validation_error()

            # 2. Relay to every admin chat (delegate to service)
            outcomes = self.relay_service.relay(validation_result.require_submission())

            # 3. Build response (controller responsibility)
            return self.response_builder.build_sent_response(
                self.relay_service.count_delivered(outcomes)
            )
        except Exception:
            logger.exception("Internal error while handling submission")
            return self.response_builder.build_internal_error()
