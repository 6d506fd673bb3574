"""Entity-parameterized CRUD building blocks for FastAPI and SQLAlchemy."""

__version__ = "0.1.0"
