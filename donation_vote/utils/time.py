from datetime import datetime, timezone


def utc_now_naive() -> datetime:
    """Naive UTC "now"; every stored timestamp and every expiry comparison uses it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
