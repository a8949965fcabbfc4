"""
NoteDeck Backend — Profile Builder
===================================

Turns an identity provider user record into the profile shown on the
account page. Pure functions; no I/O.

Field rules:
    name                full_name → user_name → "User"
    email               email → ""
    avatar_url          user_metadata.avatar_url → ""
    providers           app_metadata.providers → []
    preferred_username  user_metadata.preferred_username → ""
    handle              "@<preferred_username>" if set, else email
"""

from typing import Any, Dict

from notedeck.schemas.profile import ProfileResponse

DEFAULT_NAME = "User"


def get_initials(name: str) -> str:
    """
    First letter of each space-separated word, upper-cased, at most two.

    >>> get_initials("ada lovelace byron")
    'AL'
    """
    return "".join(part[:1] for part in name.split(" ")).upper()[:2]


def build_profile(user: Dict[str, Any]) -> ProfileResponse:
    """
    Apply the field rules above to a user record.

    `user_metadata` and `app_metadata` may be missing or null (e.g. accounts
    created by email only), so both fall back to empty dicts.
    """
    user_metadata = user.get("user_metadata") or {}
    app_metadata = user.get("app_metadata") or {}

    name = user_metadata.get("full_name") or user_metadata.get("user_name") or DEFAULT_NAME
    email = user.get("email") or ""
    preferred_username = user_metadata.get("preferred_username") or ""

    return ProfileResponse(
        id=str(user["id"]),
        email=email,
        name=name,
        preferred_username=preferred_username,
        avatar_url=user_metadata.get("avatar_url") or "",
        providers=list(app_metadata.get("providers") or []),
        initials=get_initials(name),
        handle=f"@{preferred_username}" if preferred_username else email,
    )
