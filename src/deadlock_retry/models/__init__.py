__all__ = (
    "DatabaseHelper",
)

from .db_helper import DatabaseHelper
