from stratplan.formatting import format_percent, status_badge, status_class, status_label


def test_format_percent():
    assert format_percent(0.75, 0) == "75%"
    assert format_percent(0.7534, 1) == "75.3%"
    assert format_percent(0.7536, 2) == "75.36%"
    assert format_percent(0) == "0%"


def test_status_label_and_class():
    assert status_label("on-track") == "On Track"
    assert status_label("at-risk") == "At Risk"
    assert status_label("off-track") == "Off Track"
    assert status_label("bogus") == "Unknown"
    assert status_class("on-track") == "badge-success"
    assert status_class("at-risk") == "badge-warning"
    assert status_class("off-track") == "badge-danger"
    assert status_class("bogus") == "badge-secondary"


def test_status_badge_markup():
    assert status_badge("off-track") == "[red]Off Track[/red]"
