from __future__ import annotations

_STATUS_LABELS = {
    "on-track": "On Track",
    "at-risk": "At Risk",
    "off-track": "Off Track",
}

_STATUS_CLASSES = {
    "on-track": "badge-success",
    "at-risk": "badge-warning",
    "off-track": "badge-danger",
}

# rich markup colours for terminal output
_STATUS_STYLES = {
    "on-track": "green",
    "at-risk": "yellow",
    "off-track": "red",
}


def format_percent(pct: float, decimals: int = 0) -> str:
    """Render a completion fraction as a percentage, e.g. 0.7534 -> '75.3%'."""
    return f"{pct * 100:.{decimals}f}%"


def status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, "Unknown")


def status_class(status: str) -> str:
    return _STATUS_CLASSES.get(status, "badge-secondary")


def status_style(status: str) -> str:
    return _STATUS_STYLES.get(status, "white")


def status_badge(status: str) -> str:
    style = status_style(status)
    return f"[{style}]{status_label(status)}[/{style}]"
