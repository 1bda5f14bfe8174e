from typing import Optional

from flask import jsonify


class SubmissionResponseBuilder:
    """
    Build the JSON envelopes returned by the submission API
    Every body carries an "ok" flag so the landing page can branch on it
    """

    RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

    def build_json_response(self, data: dict, status_code: int = 200) -> tuple:
        """
        Build JSON response for API endpoints

        Args:
            data: Data to include in response
            status_code: HTTP status code

        Returns:
            Tuple of (json_response, status_code)
        """
        return jsonify(data), status_code

    def build_sent_response(self, sent_to: int) -> tuple:
        """Successful relay, with the number of recipients reached"""
        return self.build_json_response({"ok": True, "sent_to": sent_to}, 200)

    def build_error_json(self, error: str, status_code: int = 500) -> tuple:
        """
        Build error JSON response

        Args:
            error: Short, generic error code for the client
            status_code: HTTP status code

        Returns:
            Tuple of (json_response, status_code)
        """
        return self.build_json_response({"ok": False, "error": error}, status_code)

    def build_validation_error(self) -> tuple:
        return self.build_error_json("required fields", 400)

    def build_internal_error(self) -> tuple:
        return self.build_error_json("internal", 500)

    def build_rate_limit_response(self, retry_after: Optional[int] = None):
        """
        Build the 429 rejection

        Args:
            retry_after: Seconds until the current window closes

        Returns:
            Tuple of (json_response, 429, headers)
        """
        body, status = self.build_error_json(self.RATE_LIMIT_MESSAGE, 429)
        headers = {}
        if retry_after is not None:
            headers["Retry-After"] = str(max(1, int(retry_after)))
        return body, status, headers
