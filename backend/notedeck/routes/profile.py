"""
NoteDeck Backend — Profile Route
=================================

What:  GET /api/profile: the signed-in user's profile for the account page.
How:   Reads the access token, asks the identity provider who owns it, and
       shapes the answer with build_profile().

Token sources, in order:
    1. Authorization: Bearer <token>
    2. The session cookie named by AUTH_COOKIE_NAME

Without a valid session the route answers 401 with `login_url`, and the
frontend sends the user to sign in.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.security.utils import get_authorization_scheme_param

from notedeck.config import settings
from notedeck.schemas.note import ErrorResponse
from notedeck.schemas.profile import ProfileResponse
from notedeck.services.identity_service import identity_service
from notedeck.services.profile_service import build_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Profile"])


def extract_access_token(request: Request) -> Optional[str]:
    """
    Return the caller's access token, or None.

    Why the header wins: API clients and tests send it explicitly, while the
    cookie may hold an older session left in the browser.
    """
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and token:
        return token
    return request.cookies.get(settings.auth_cookie_name) or None


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={
        200: {"description": "Profile of the signed-in user", "model": ProfileResponse},
        401: {"description": "No valid session", "model": ErrorResponse},
        503: {"description": "Identity provider unavailable", "model": ErrorResponse},
    },
    summary="Get the signed-in user's profile",
)
async def get_profile(request: Request) -> ProfileResponse:
    user = await identity_service.get_user(extract_access_token(request))
    return build_profile(user)
