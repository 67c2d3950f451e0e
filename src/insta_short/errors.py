"""Errors raised while shortening a URL.

Every workflow failure is a :class:`ShortenError` whose ``user_message`` is
what the interface shows; the workflow catches them and never lets one
escape to the caller.
"""
from typing import Optional


class ConfigError(Exception):
    """Missing or invalid configuration, reported before any request."""


class ShortenError(Exception):
    user_message = "An unknown error occurred."

    def __init__(self, user_message: Optional[str] = None):
        if user_message is not None:
            self.user_message = user_message
        super().__init__(self.user_message)


# ========== Validation ==========
class EmptyInputError(ShortenError):
    user_message = "Please enter a URL to shorten."


class InvalidUrlFormatError(ShortenError):
    user_message = "Please enter a valid URL."


# ========== Service ==========
class ServiceHttpError(ShortenError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"The service failed with status: {status}")


class ServiceReportedError(ShortenError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message[:1].upper() + message[1:])


class MalformedResponseError(ShortenError):
    user_message = "Received an invalid response from the service."


class ConnectivityError(ShortenError):
    user_message = (
        "Could not connect to the shortening service. "
        "Please check your network connection or try again later."
    )

    def __init__(self, detail: Optional[str] = None):
        # raw transport text, logged but never shown
        self.detail = detail
        super().__init__()


class ServiceTimeoutError(ConnectivityError):
    user_message = "The shortening service did not respond in time. Please try again later."
