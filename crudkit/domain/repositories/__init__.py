"""Repository interfaces - define contracts for data access."""

from crudkit.domain.repositories.base import InsertResult, IRepository

__all__ = ["InsertResult", "IRepository"]
