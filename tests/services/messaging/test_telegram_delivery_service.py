# tests/services/messaging/test_telegram_delivery_service.py
import unittest
from unittest.mock import Mock, patch

import requests

from brief_relay.errors import TelegramDeliveryError
from brief_relay.services.messaging.telegram_delivery_service import TelegramDeliveryService

POST_PATH = "brief_relay.services.messaging.telegram_delivery_service.requests.post"


def make_response(json_data=None, status_code=200, json_error=None):
    response = Mock()
    response.status_code = status_code
    response.text = "<html>bad gateway</html>"
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


class TestTelegramDeliveryService(unittest.TestCase):
    """Test cases for TelegramDeliveryService"""

    def setUp(self):
        self.service = TelegramDeliveryService(bot_token="123:ABC", timeout=5)

    def test_send_message_url(self):
        self.assertEqual(
            self.service.send_message_url,
            "https://api.telegram.org/bot123:ABC/sendMessage"
        )

    def test_custom_api_base_strips_trailing_slash(self):
        service = TelegramDeliveryService(bot_token="t", api_base="http://localhost:8081/")
        self.assertEqual(service.send_message_url, "http://localhost:8081/bott/sendMessage")

    @patch(POST_PATH)
    def test_send_message_success(self, mock_post):
        mock_post.return_value = make_response({"ok": True, "result": {"message_id": 7}})

        result = self.service.send_message("111", "Hi\\!")

        self.assertEqual(result, {"message_id": 7})
        mock_post.assert_called_once_with(
            "https://api.telegram.org/bot123:ABC/sendMessage",
            json={"chat_id": "111", "text": "Hi\\!", "parse_mode": "MarkdownV2"},
            timeout=5
        )

    @patch(POST_PATH)
    def test_send_message_api_rejection(self, mock_post):
        rejection = {"ok": False, "error_code": 400, "description": "Bad Request: chat not found"}
        mock_post.return_value = make_response(rejection, status_code=400)

        with self.assertRaises(TelegramDeliveryError) as ctx:
            self.service.send_message("111", "text")

        self.assertEqual(ctx.exception.payload, rejection)
        self.assertEqual(ctx.exception.chat_id, "111")
        self.assertIn("chat not found", str(ctx.exception))

    @patch(POST_PATH)
    def test_send_message_non_json_response(self, mock_post):
        mock_post.return_value = make_response(status_code=502, json_error=ValueError("no json"))

        with self.assertRaises(TelegramDeliveryError) as ctx:
            self.service.send_message("111", "text")

        self.assertIn("502", str(ctx.exception))

    @patch(POST_PATH)
    def test_send_message_transport_error_hides_token(self, mock_post):
        mock_post.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /bot123:ABC/sendMessage"
        )

        with self.assertRaises(TelegramDeliveryError) as ctx:
            self.service.send_message("111", "text")

        self.assertNotIn("123:ABC", str(ctx.exception))
        self.assertNotIn("123:ABC", ctx.exception.payload)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    @patch(POST_PATH)
    def test_no_retry_on_failure(self, mock_post):
        mock_post.side_effect = requests.Timeout("timed out")

        with self.assertRaises(TelegramDeliveryError):
            self.service.send_message("111", "text")

        self.assertEqual(mock_post.call_count, 1)

    @patch(POST_PATH)
    def test_missing_token_makes_no_request(self, mock_post):
        service = TelegramDeliveryService(bot_token=None)

        with self.assertRaises(TelegramDeliveryError):
            service.send_message("111", "text")

        mock_post.assert_not_called()
