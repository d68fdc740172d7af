"""
Calendar view composition for the appointments dashboard.

Three views share one reference date:
- month: a Sunday-start grid of whole weeks covering the month
- week:  a time grid for the seven days of the reference week
- day:   a time grid for the reference day only

Everything here is pure date arithmetic over `CalendarEvent`s so the
templates only have to loop.
"""
import calendar
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

MONTH = "month"
WEEK = "week"
DAY = "day"
CALENDAR_VIEWS = (MONTH, WEEK, DAY)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MAX_EVENTS_VISIBLE = 3

SLOT_MIN_TIME = time(7, 0)
SLOT_MAX_TIME = time(20, 0)
SLOT_MINUTES = 30
SLOT_LABEL_EVERY = 2  # one label per hour
COMPACT_BELOW = timedelta(minutes=45)

TYPE_COLORS = {
    "general": {"bg": "#EFF6FF", "text": "#1D4ED8", "border": "#BFDBFE", "solid": "#2563EB"},
    "follow-up": {"bg": "#F0FDF4", "text": "#15803D", "border": "#BBF7D0", "solid": "#16A34A"},
    "emergency": {"bg": "#FEF2F2", "text": "#B91C1C", "border": "#FECACA", "solid": "#DC2626"},
}
TYPE_LABELS = {
    "general": "General",
    "follow-up": "Follow-up",
    "emergency": "Emergency",
}


def type_colors(appt_type: Optional[str]) -> dict:
    return TYPE_COLORS.get(appt_type or "general", TYPE_COLORS["general"])


def type_label(appt_type: Optional[str]) -> str:
    return TYPE_LABELS.get(appt_type or "general", appt_type or "General")


@dataclass
class CalendarEvent:
    id: int
    title: str
    start: datetime
    end: datetime
    doctor_name: str = ""
    type: str = "general"
    status: str = "pending"

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass
class EventChip:
    event: CalendarEvent
    label: str
    colors: dict


@dataclass
class DayCell:
    date: date
    in_month: bool
    is_today: bool
    chips: List[EventChip] = field(default_factory=list)
    overflow: int = 0


@dataclass
class MonthGrid:
    month_start: date
    weeks: List[List[DayCell]]
    day_names: List[str] = field(default_factory=lambda: list(DAY_NAMES))


@dataclass
class Slot:
    time: time
    label: str  # empty for the half-hour rows


@dataclass
class PlacedEvent:
    event: CalendarEvent
    slot_start: int
    slot_span: int
    compact: bool
    time_text: str
    colors: dict
    type_label: str


@dataclass
class TimeGridDay:
    date: date
    header: str
    is_today: bool
    events: List[PlacedEvent] = field(default_factory=list)


@dataclass
class TimeGrid:
    view: str
    days: List[TimeGridDay]
    slots: List[Slot]


# ─── Date arithmetic ──────────────────────────────────────────────────────────

def parse_view(value: Optional[str]) -> str:
    return value if value in CALENDAR_VIEWS else MONTH


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def start_of_week(d: date) -> date:
    # date.weekday(): Monday == 0 ... Sunday == 6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def end_of_week(d: date) -> date:
    return start_of_week(d) + timedelta(days=6)


def add_months(d: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day to the target month."""
    index = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(index, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return d.replace(year=year, month=month0 + 1, day=min(d.day, last_day))


def navigate_date(view: str, d: date, direction: int) -> date:
    """
    Move the reference date one unit forward (+1) or back (-1).

    Month navigation keeps the day of month, clamped to the length of the
    target month (Jan 31 + 1 month is Feb 28 or 29).
    """
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or 1, got {direction!r}")

    view = parse_view(view)
    if view == MONTH:
        return add_months(d, direction)
    if view == WEEK:
        return d + timedelta(weeks=direction)
    return d + timedelta(days=direction)


def visible_range(view: str, d: date):
    """First and last calendar day rendered for a view (inclusive)."""
    view = parse_view(view)
    if view == MONTH:
        return start_of_week(start_of_month(d)), end_of_week(end_of_month(d))
    if view == WEEK:
        return start_of_week(d), end_of_week(d)
    return d, d


# ─── Labels ───────────────────────────────────────────────────────────────────

def header_label(view: str, d: date) -> str:
    view = parse_view(view)
    if view == MONTH:
        return d.strftime("%B %Y")
    if view == WEEK:
        return f"{d:%b} {d.day}, {d.year}"
    return f"{d:%A, %b} {d.day}, {d.year}"


def subtitle(view: str, d: date) -> str:
    view = parse_view(view)
    if view == MONTH:
        return f"{d:%B %Y} — Monthly schedule overview"
    if view == WEEK:
        return f"Week of {d:%b} {d.day}, {d.year}"
    return f"Detailed timeline for {d:%A, %B} {d.day}"


# ─── Month grid ───────────────────────────────────────────────────────────────

def _group_by_day(events: Iterable[CalendarEvent]) -> Dict[date, List[CalendarEvent]]:
    grouped: Dict[date, List[CalendarEvent]] = {}
    for event in events:
        grouped.setdefault(event.start.date(), []).append(event)
    for day_events in grouped.values():
        day_events.sort(key=lambda e: e.start)
    return grouped


def _chip_label(event: CalendarEvent) -> str:
    first_name = (event.title or "").split(" ")[0]
    return f"{event.start:%H:%M} · {first_name}"


def build_month_grid(events: Iterable[CalendarEvent], current_date: date, today: date) -> MonthGrid:
    month_start = start_of_month(current_date)
    grid_start, grid_end = visible_range(MONTH, current_date)
    by_day = _group_by_day(events)

    weeks: List[List[DayCell]] = []
    day = grid_start
    while day <= grid_end:
        week = []
        for _ in range(7):
            day_events = by_day.get(day, [])
            week.append(
                DayCell(
                    date=day,
                    in_month=(day.year, day.month) == (month_start.year, month_start.month),
                    is_today=day == today,
                    chips=[
                        EventChip(event=e, label=_chip_label(e), colors=type_colors(e.type))
                        for e in day_events[:MAX_EVENTS_VISIBLE]
                    ],
                    overflow=max(0, len(day_events) - MAX_EVENTS_VISIBLE),
                )
            )
            day += timedelta(days=1)
        weeks.append(week)

    return MonthGrid(month_start=month_start, weeks=weeks)


# ─── Week / day time grid ─────────────────────────────────────────────────────

def build_slots() -> List[Slot]:
    slots = []
    cursor = datetime.combine(date.min, SLOT_MIN_TIME)
    stop = datetime.combine(date.min, SLOT_MAX_TIME)
    index = 0
    while cursor < stop:
        label = cursor.strftime("%H:%M") if index % SLOT_LABEL_EVERY == 0 else ""
        slots.append(Slot(time=cursor.time(), label=label))
        cursor += timedelta(minutes=SLOT_MINUTES)
        index += 1
    return slots


def _place(event: CalendarEvent, day: date) -> Optional[PlacedEvent]:
    window_start = datetime.combine(day, SLOT_MIN_TIME)
    window_end = datetime.combine(day, SLOT_MAX_TIME)

    start = max(event.start, window_start)
    end = min(event.end, window_end)
    if end <= start:
        return None

    slot_start = int((start - window_start).total_seconds() // (SLOT_MINUTES * 60))
    slot_span = max(1, math.ceil((end - start).total_seconds() / (SLOT_MINUTES * 60)))

    return PlacedEvent(
        event=event,
        slot_start=slot_start,
        slot_span=slot_span,
        compact=event.duration < COMPACT_BELOW,
        time_text=f"{event.start:%H:%M} - {event.end:%H:%M}",
        colors=type_colors(event.type),
        type_label=type_label(event.type),
    )


def build_time_grid(events: Iterable[CalendarEvent], view: str, current_date: date, today: date) -> TimeGrid:
    view = WEEK if view == WEEK else DAY
    first, last = visible_range(view, current_date)
    by_day = _group_by_day(events)

    days: List[TimeGridDay] = []
    day = first
    while day <= last:
        if view == WEEK:
            header = f"{day:%a} {day.day}"
        else:
            header = f"{day:%A, %B} {day.day}"

        placed = [p for p in (_place(e, day) for e in by_day.get(day, [])) if p is not None]
        days.append(TimeGridDay(date=day, header=header, is_today=day == today, events=placed))
        day += timedelta(days=1)

    return TimeGrid(view=view, days=days, slots=build_slots())
