"""
Error types shared by the API client, the query cache and the CLI.

Taxonomy:
- TransportError: the request never produced an HTTP response
- ApiError: the server answered with a non-2xx status or an unreadable body
- ChatBusyError: a chat message is already being sent
- ViewerError: the document viewer could not open a material
"""

from __future__ import annotations

from typing import Optional


AUTH_REQUIRED = "Authentication required. Please log in."
PERMISSION_DENIED = "You do not have permission to access this resource."
NOT_FOUND = "The requested resource was not found."
SERVER_ERROR = "Server error. Please try again later."
GENERIC_ERROR = "An error occurred"


class NounSuccessError(Exception):
    """Base class for all errors raised by this package."""


class ApiError(NounSuccessError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class TransportError(ApiError):
    """Network failure: connection refused, DNS, timeout..."""


class ChatBusyError(NounSuccessError):
    pass


class ViewerError(NounSuccessError):
    pass


def message_for_status(status: int, body_message: Optional[str] = None) -> str:
    """
    Pick the user-facing message for an HTTP error status.

    Known statuses always get their fixed message; anything else uses the
    message the server sent, or a generic one.
    """
    if status == 401:
        return AUTH_REQUIRED
    if status == 403:
        return PERMISSION_DENIED
    if status == 404:
        return NOT_FOUND
    if status == 500:
        return SERVER_ERROR
    return body_message or GENERIC_ERROR
