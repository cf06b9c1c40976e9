"""SQL module exports."""

from .formatter import format_sql, split_statements, statement_type

__all__ = ["format_sql", "split_statements", "statement_type"]
