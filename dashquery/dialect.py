from typing import Any

from sqlalchemy import Boolean, Text, literal, type_coerce
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.elements import ColumnElement


POSTGRES_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062


class StoreDialect:
    """Backend-specific rendering and error classification for a SQLStore."""

    def __init__(self, name: str):
        self.name = name

    def boolean_literal(self, value: bool) -> ColumnElement:
        return literal(value, Boolean())

    def contains_ci(self, column: Any, text: str) -> ColumnElement:
        """Case-insensitive substring match with LIKE wildcards escaped.

        The column is coerced to plain text so that serialized columns
        compare against their stored representation.
        """
        return type_coerce(column, Text()).icontains(text, autoescape=True)

    def is_unique_constraint_violation(self, error: Exception) -> bool:
        if not isinstance(error, IntegrityError):
            return False

        orig = getattr(error, "orig", None)
        if orig is None:
            return False

        if self.name == "sqlite":
            return "UNIQUE constraint failed" in str(orig)

        if self.name == "postgresql":
            code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
            return code == POSTGRES_UNIQUE_VIOLATION

        if self.name in ("mysql", "mariadb"):
            args = getattr(orig, "args", ())
            return bool(args) and args[0] == MYSQL_DUPLICATE_ENTRY

        return False

    def __repr__(self):
        return f"<StoreDialect {self.name}>"
