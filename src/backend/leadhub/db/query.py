from typing import Any, List, Tuple


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user search text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def where_clause(clauses: List[str]) -> str:
    return f"WHERE {' AND '.join(clauses)}" if clauses else ""


def date_range(column: str, since=None, until=None) -> Tuple[List[str], List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if since is not None:
        clauses.append(f"{column} >= %s")
        params.append(since)
    if until is not None:
        clauses.append(f"{column} <= %s")
        params.append(until)
    return clauses, params
