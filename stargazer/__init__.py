"""
Stargazer Backend — Application Package Initializer
====================================================

What: Marks the `stargazer` directory as a Python package.
Who:  Used by uvicorn (`stargazer.main:app`), pytest, and the console script.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (StarService)      │  ← lookups, conflicts, not-found
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy + auto-migrate
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
