"""
NoteDeck Backend — Profile Schemas
===================================

What:  The read-only profile shown on the account page, derived from the
       identity provider's user record.
"""

from typing import List

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: str = Field(description="User ID assigned by the identity provider")
    email: str = Field(default="", description="Primary email, empty if the provider has none")
    name: str = Field(description="Display name; falls back to 'User'")
    preferred_username: str = Field(default="", description="Username from the sign-in provider")
    avatar_url: str = Field(default="", description="Avatar image URL, empty if none")
    providers: List[str] = Field(default_factory=list, description="Linked sign-in providers")
    initials: str = Field(description="Up to two upper-case initials for the avatar fallback")
    handle: str = Field(description="'@username' when a username exists, else the email")
