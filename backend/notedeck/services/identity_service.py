"""
NoteDeck Backend — Identity Provider Client
============================================

What:  Resolves an access token into the signed-in user's record.
How:   GET {SUPABASE_URL}/auth/v1/user with the project's `apikey` header and
       the user's bearer token, over httpx.
Who:   Called by the /api/profile route.

Sessions, sign-in and token refresh all belong to the identity provider;
this client only asks "who owns this token?".

Resilience Strategy:
    Transport errors (DNS, connect, read timeout) are retried with tenacity
    using exponential backoff with jitter. HTTP answers are never retried:
    a 401/403 means the token is bad, a 5xx is reported as unavailable.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from notedeck.config import settings
from notedeck.exceptions import AuthenticationError, IdentityProviderError

logger = logging.getLogger(__name__)

USER_ENDPOINT = "/auth/v1/user"


class IdentityService:
    """
    Thin async client for the identity provider's user endpoint.

    Args:
        transport: Optional httpx transport (tests pass httpx.MockTransport)
        wait: Optional tenacity wait strategy; defaults to exponential jitter
              built from RETRY_MIN_WAIT / RETRY_MAX_WAIT
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wait: Optional[wait_base] = None,
    ):
        self._transport = transport
        self._wait = wait or wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        )

    async def get_user(self, access_token: Optional[str]) -> Dict[str, Any]:
        """
        Fetch the user that owns `access_token`.

        Returns:
            The provider's user record (id, email, user_metadata, app_metadata, ...)

        Raises:
            AuthenticationError: No token, or the provider rejected it
            IdentityProviderError: Not configured, unreachable, or 5xx
        """
        if not access_token:
            raise AuthenticationError(login_url=settings.login_path)

        if not settings.identity_configured:
            raise IdentityProviderError(
                message="The sign-in service is not configured",
                context={"missing": "SUPABASE_URL/SUPABASE_ANON_KEY"},
            )

        try:
            response = await self._fetch_user(access_token)
        except httpx.TransportError as e:
            logger.error("Identity provider unreachable: %s", str(e))
            raise IdentityProviderError(
                retry_after=settings.retry_max_wait,
                context={"error_type": type(e).__name__},
            )

        if response.status_code in (401, 403):
            logger.info("Identity provider rejected access token (%d)", response.status_code)
            raise AuthenticationError(
                message="Your session has expired. Please sign in again.",
                login_url=settings.login_path,
            )

        if response.status_code >= 400:
            logger.error("Identity provider returned HTTP %d", response.status_code)
            raise IdentityProviderError(context={"status_code": response.status_code})

        user = response.json()
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthenticationError(login_url=settings.login_path)

        logger.debug("Resolved access token to user %s", user["id"])
        return user

    async def _fetch_user(self, access_token: str) -> httpx.Response:
        """
        One GET of the user endpoint, retried on transport errors only.

        Retry Flow:
            attempt 1 → TransportError → wait (jitter) → attempt 2 → ... → attempt N
            → the last TransportError is re-raised (reraise=True)

        Any HTTP answer, 4xx and 5xx included, ends the loop and is returned
        for get_user() to classify.
        """
        headers = {
            "apikey": settings.supabase_anon_key,
            "Authorization": f"Bearer {access_token}",
        }

        async with httpx.AsyncClient(
            base_url=settings.supabase_url,
            timeout=settings.identity_timeout,
            transport=self._transport,
        ) as client:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(httpx.TransportError),
                stop=stop_after_attempt(settings.retry_max_attempts),
                wait=self._wait,
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    response = await client.get(USER_ENDPOINT, headers=headers)

        return response


identity_service = IdentityService()
