"""
PAWhere Backend — Application Package
=======================================

Registration intake for the PAWhere landing page: the early-access / VIP
sign-up form, its survey, and the API that stores submissions.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (intake flow, storage)   │  ← Validation, dedup, persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    client/ holds the survey side: the multi-step form controller and the
    HTTP client it submits through.
"""

__version__ = "1.0.0"
