# Services package init
"""
NoteDeck Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the external collaborators.

Service Inventory:
    - NoteService:      note create / delete / list against the hosted store
    - ViewCache:        path-keyed cache of rendered views, revalidated on mutation
    - IdentityService:  resolves access tokens through the identity provider
    - profile_service:  builds the account-page profile from a user record
"""
