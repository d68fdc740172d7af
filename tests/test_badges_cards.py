from datetime import datetime, timedelta

from src.ui.badges import avatar_style, hash_to_hue, initials, status_style
from src.ui.cards import humanize_age, percent_delta
from src.ui.navigation import active_entity, side_nav, top_nav


def test_status_styles():
    assert status_style("confirmed").tone == "green"
    assert status_style("no-show").label == "No-show"
    assert status_style("critical").tone == "red"
    # Unknown statuses render like pending
    assert status_style("archived") == status_style("pending")
    assert status_style(None) == status_style("pending")


def test_initials():
    assert initials("John Doe") == "JD"
    assert initials("Alice") == "A"
    assert initials("mary jane watson") == "MJ"
    assert initials("") == ""


def test_hash_to_hue_is_stable_and_in_range():
    assert hash_to_hue("a") == 127
    assert hash_to_hue("ab") == 135
    assert hash_to_hue("") == 30
    long_name = "Dr. Bartholomew Maximilian Featherstonehaugh-Cholmondeley"
    assert hash_to_hue(long_name) == hash_to_hue(long_name)
    assert 30 <= hash_to_hue(long_name) < 330


def test_avatar_style_uses_hue():
    assert "hsl(127 60% 90%)" in avatar_style("a")


def test_percent_delta():
    assert percent_delta(12, 10) == ("+20%", True)
    assert percent_delta(8, 10) == ("-20%", False)
    assert percent_delta(10, 10) == ("+0%", True)
    assert percent_delta(5, 0) == (None, True)


def test_humanize_age():
    now = datetime(2025, 10, 5, 12, 0)
    assert humanize_age(now - timedelta(seconds=20), now) == "Just now"
    assert humanize_age(now - timedelta(minutes=5), now) == "5 min ago"
    assert humanize_age(now - timedelta(hours=3), now) == "3 hr ago"
    assert humanize_age(now - timedelta(hours=30), now) == "Yesterday"
    assert humanize_age(now - timedelta(days=4), now) == "4 days ago"


def test_active_entity():
    assert active_entity("/patients/dashboard") == "patients"
    assert active_entity("/patients/12") == "patients"
    assert active_entity("/") == "home"


def test_top_nav_highlights_current_section():
    links = top_nav("/appointments/dashboard")
    assert [link.label for link in links] == ["Home", "Appointments", "Patients", "Medicines"]
    assert [link.label for link in links if link.active] == ["Appointments"]


def test_side_nav_follows_section():
    links = side_nav("/medicines/reports")
    assert [link.href for link in links] == ["/medicines/dashboard", "/medicines/reports"]
    assert [link.active for link in links] == [False, True]

    # Pages outside a section fall back to the home links
    assert [link.href for link in side_nav("/health")] == ["/home/dashboard", "/home/reports"]
