"""Repository implementations using SQLAlchemy."""

from crudkit.infrastructure.repositories.sqlalchemy_repository import SQLAlchemyRepository

__all__ = ["SQLAlchemyRepository"]
