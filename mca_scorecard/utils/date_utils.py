"""Date manipulation utilities"""

from datetime import date, timedelta
from typing import List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def months_spanned(start: date, end: date) -> int:
    """Inclusive number of calendar months touched by [start, end], minimum 1"""
    span = (end.year - start.year) * 12 + (end.month - start.month) + 1
    return max(span, 1)


def generate_month_range(start: date, end: date) -> List[Tuple[int, int]]:
    """(year, month) pairs for every calendar month from start to end (inclusive)"""
    months = []
    year, month = start.year, start.month
    for _ in range(months_spanned(start, end)):
        months.append((year, month))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months


def month_key(value: date) -> str:
    """Calendar month label, e.g. 2024-03"""
    return f"{value.year:04d}-{value.month:02d}"
