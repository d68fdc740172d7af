from dataclasses import dataclass


@dataclass(frozen=True)
class StatusStyle:
    tone: str  # maps to a .tone-<name> CSS class
    label: str


# Single source of truth for every status colour in the app.
STATUS_MAP = {
    # Appointment statuses
    "confirmed": StatusStyle("green", "Confirmed"),
    "pending": StatusStyle("amber", "Pending"),
    "cancelled": StatusStyle("red", "Cancelled"),
    "completed": StatusStyle("blue", "Completed"),
    "no-show": StatusStyle("purple", "No-show"),
    "rescheduled": StatusStyle("amber", "Rescheduled"),
    # Patient statuses
    "active": StatusStyle("green", "Active"),
    "inactive": StatusStyle("neutral", "Inactive"),
    "critical": StatusStyle("red", "Critical"),
}


def status_style(status) -> StatusStyle:
    return STATUS_MAP.get(status, STATUS_MAP["pending"])


def initials(name: str) -> str:
    """"John Doe" -> "JD", "Alice" -> "A"."""
    words = (name or "").split()
    return "".join(w[0] for w in words)[:2].upper()


def hash_to_hue(value: str) -> int:
    """Deterministic hue from a string; same name always maps to the same colour."""
    h = 0
    for ch in value or "":
        h = ord(ch) + ((h << 5) - h)
        h = (h + 2**31) % 2**32 - 2**31  # keep it a signed 32-bit int
    # Bias away from muddy reds/browns near 0° and 360°
    return abs(h) % 300 + 30


def avatar_style(name: str) -> str:
    hue = hash_to_hue(name)
    return (
        f"background: hsl({hue} 60% 90%); "
        f"border-color: hsl({hue} 40% 82%); "
        f"color: hsl({hue} 50% 30%);"
    )
