"""
RecipeShare API: Application Package Initializer
=================================================

What: Marks the `recipeshare` directory as a Python package.
Who:  Imported by uvicorn (`recipeshare.main:app`), Alembic and pytest.

Architecture Note:
    The service follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Listing + Lifecycle)    │  ← ordering of store/image calls
    ├─────────────────────────────────────┤
    │  RecipeStore │ ImageStore (ports)   │  ← SQLAlchemy / Cloudinary
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes never touch the session or the image host directly; services
    receive their collaborators at construction time.
"""

__version__ = "1.0.0"
