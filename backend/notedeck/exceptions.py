"""
NoteDeck Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, each mapped to an HTTP status by the
       global handlers registered in main.py.

Exception Hierarchy:
    NoteDeckError (base)                → 500 Internal Server Error
    ├── AuthenticationError             → 401 Unauthorized
    └── IdentityProviderError           → 503 Service Unavailable

Note operations deliberately raise nothing of their own: an empty title is a
silent no-op, and store failures (SQLAlchemyError) travel untouched to the
error boundary in main.py.
"""

from typing import Any, Dict, Optional


class NoteDeckError(Exception):
    """
    Base exception for all NoteDeck application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned only where a
                  handler explicitly chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(NoteDeckError):
    """
    Raised when the caller has no valid session.

    When:    No access token was sent, or the identity provider rejected it.
    HTTP:    401 Unauthorized, with `login_url` in the details so the frontend
             can send the user to sign in.
    """

    def __init__(
        self,
        message: str = "You need to sign in to view this page",
        login_url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if login_url:
            ctx["login_url"] = login_url
        super().__init__(message=message, context=ctx)
        self.login_url = login_url


class IdentityProviderError(NoteDeckError):
    """
    Raised when the identity provider cannot answer.

    When:    Not configured, unreachable after retries, or returned a 5xx.
    HTTP:    503 Service Unavailable (with Retry-After when known)
    """

    def __init__(
        self,
        message: str = "The sign-in service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
