class RelayError(Exception):
    """Base class for errors raised by the relay"""


class TelegramDeliveryError(RelayError):
    """A single sendMessage call was rejected or could not be made"""

    def __init__(self, message, chat_id=None, payload=None):
        super().__init__(message)
        self.chat_id = chat_id
        self.payload = payload


class TLSConfigurationError(RelayError):
    """Certificate or key material could not be loaded"""
