from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class NavItem:
    entity: str
    label: str
    icon: str

    @property
    def href(self) -> str:
        return f"/{self.entity}/dashboard"


NAV_ITEMS = [
    NavItem("home", "Home", "home"),
    NavItem("appointments", "Appointments", "calendar"),
    NavItem("patients", "Patients", "users"),
    NavItem("medicines", "Medicines", "pill"),
]

SIDEBAR_VIEWS = [
    ("dashboard", "Dashboard"),
    ("reports", "Reports"),
]


@dataclass
class NavLink:
    href: str
    label: str
    active: bool
    icon: str = ""


def active_entity(path: str) -> str:
    """/patients/dashboard -> "patients"."""
    segment = (path or "/").strip("/").split("/")[0]
    return segment or "home"


def top_nav(path: str) -> List[NavLink]:
    entity = active_entity(path)
    return [NavLink(item.href, item.label, item.entity == entity, item.icon) for item in NAV_ITEMS]


def side_nav(path: str) -> List[NavLink]:
    entity = active_entity(path)
    if entity not in {item.entity for item in NAV_ITEMS}:
        entity = "home"
    links = []
    for key, label in SIDEBAR_VIEWS:
        href = f"/{entity}/{key}"
        links.append(NavLink(href, label, path == href or path.startswith(href + "/")))
    return links