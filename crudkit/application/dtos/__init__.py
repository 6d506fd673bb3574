"""Data Transfer Objects for application layer."""

from crudkit.application.dtos.paging_dto import PagingResult

__all__ = ["PagingResult"]
