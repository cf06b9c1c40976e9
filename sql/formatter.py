"""
SQL text helpers for the query editor.

Purely cosmetic: nothing here changes what gets executed. The executor
always sends the editor text to the driver verbatim.
"""

import logging
from typing import List
import sqlparse

logger = logging.getLogger(__name__)


def split_statements(sql: str) -> List[str]:
    """Split editor text into individual, non-empty statements."""
    return [s.strip() for s in sqlparse.split(sql or "") if s.strip()]


def statement_type(sql: str) -> str:
    """
    Classify the first statement of a query.

    Returns:
        Upper-case statement type ("SELECT", "UPDATE", ...) or "UNKNOWN"
    """
    if not sql or not sql.strip():
        return "UNKNOWN"

    for statement in sqlparse.parse(sql):
        if str(statement).strip():
            return statement.get_type()
    return "UNKNOWN"


def format_sql(sql: str) -> str:
    """Reindent a query and upper-case its keywords for display."""
    if not sql or not sql.strip():
        return ""
    return sqlparse.format(sql.strip(), reindent=True, keyword_case="upper")
