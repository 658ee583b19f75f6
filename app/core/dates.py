from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time; every stored timestamp goes through here."""
    return datetime.now(timezone.utc)
