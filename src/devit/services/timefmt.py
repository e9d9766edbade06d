from datetime import datetime, timezone


def as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def relative_time(moment: datetime | None, now: datetime | None = None) -> str:
    """Render a timestamp as "N minutes ago", "N hours ago" or "N days ago"."""
    if moment is None:
        return "Never"
    now = as_utc(now) if now else datetime.now(timezone.utc)
    minutes = max(int((now - as_utc(moment)).total_seconds() // 60), 0)
    if minutes < 60:
        return f"{minutes} minutes ago"
    if minutes < 1440:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = minutes // 1440
    return f"{days} day{'s' if days > 1 else ''} ago"
