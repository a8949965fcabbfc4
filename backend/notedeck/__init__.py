"""
NoteDeck Backend — Application Package
======================================

What: The `notedeck` package: notes CRUD and profile display for the NoteDeck app.
Who:  Imported by uvicorn (`notedeck.main:app`) and by the pytest suite.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← notes, identity, view cache
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The notes table and the user accounts both live in the hosted backend
    service; this package only talks to them.
"""

__version__ = "0.3.0"
