from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass
class StatCard:
    label: str
    value: Union[str, int]
    delta: Optional[str] = None  # e.g. "+12%" or "-2%"
    positive: bool = True
    icon: str = ""


@dataclass
class LogEvent:
    """One row of an event log / timeline."""
    title: str
    time: str
    body: Optional[str] = None
    unread: bool = False


def percent_delta(current: float, previous: float):
    """
    Format the change from `previous` to `current` as a signed percentage.
    Returns (delta, positive); delta is None when there is no baseline.
    """
    if not previous:
        return None, True
    change = (current - previous) / previous * 100
    return f"{change:+.0f}%", change >= 0


def humanize_age(then: datetime, now: datetime) -> str:
    secs = int((now - then).total_seconds())
    if secs < 60:
        return "Just now"
    if secs < 3600:
        return f"{secs // 60} min ago"
    if secs < 86400:
        return f"{secs // 3600} hr ago"
    days = secs // 86400
    if days == 1:
        return "Yesterday"
    return f"{days} days ago"
