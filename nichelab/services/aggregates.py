"""
Aggregation helpers shared by the analytics-style service methods.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from nichelab.database.models import COMPETITION_LEVELS


def month_key(value: Union[str, datetime]) -> str:
    """YYYY-MM for an ISO timestamp or datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return f"{value.year}-{value.month:02d}"


def count_by_month(rows: Iterable[Dict[str, Any]], field: str = "created_at") -> Dict[str, int]:
    grouped: Dict[str, int] = {}
    for row in rows:
        if row.get(field):
            key = month_key(row[field])
            grouped[key] = grouped.get(key, 0) + 1
    return grouped


def sum_by_month(rows: Iterable[Dict[str, Any]], value_field: str, field: str = "created_at") -> Dict[str, float]:
    grouped: Dict[str, float] = {}
    for row in rows:
        if row.get(field):
            key = month_key(row[field])
            grouped[key] = grouped.get(key, 0) + (row.get(value_field) or 0)
    return grouped


def average(values: List[float]) -> float:
    """Arithmetic mean, 0 for no values."""
    return sum(values) / len(values) if values else 0


def competition_breakdown(levels: List[Optional[str]]) -> Dict[str, Dict[str, Any]]:
    """
    Count and share of each competition level.

    Percentages are rounded to one decimal; with no entries every share is 0.0.
    """
    total = len(levels)
    breakdown = {}
    for level in COMPETITION_LEVELS:
        count = sum(1 for value in levels if value == level)
        breakdown[level] = {
            "count": count,
            "percentage": round(count / total * 100, 1) if total else 0.0,
        }
    return breakdown
