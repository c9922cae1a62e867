"""Persistence backends."""

from flask import current_app

from .abstract_repository import AbstractRepository
from .sql_repository import SqlAlchemyRepository

__all__ = ["AbstractRepository", "SqlAlchemyRepository", "get_repository"]


def get_repository() -> AbstractRepository:
    """Return the repository bound to the running application."""

    return current_app.extensions["repository"]
