import time
from datetime import datetime, timezone


def now_epoch() -> int:
    """Current time as whole epoch seconds."""
    return int(time.time())


def now_iso() -> str:
    """Current UTC time as ISO-8601 with second resolution, e.g. 2024-05-01T12:00:00Z."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
