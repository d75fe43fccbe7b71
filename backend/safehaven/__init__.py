"""
Safe Haven Backend: Application Package
=========================================

What: REST backend for the Safe Haven Restoration Ministries counseling site.
Who:  Imported by uvicorn (`safehaven.main:app`), Alembic, the seed script and pytest.

Architecture Note:
    The backend keeps the usual layered split:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validator, state machine, assignment
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← async SQLAlchemy behind an interface
    └─────────────────────────────────────┘

    Services never import the database engine. They receive repositories,
    the mailer and the assignment strategy through their constructor, so the
    whole appointment lifecycle runs against in-memory fakes in tests.
"""

__version__ = "1.0.0"
