import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


class Config:
    """Configuration settings for the picker engine and its hosts"""

    # Zone used when a call does not pass one explicitly
    TIMEZONE = os.environ.get("LINGUATIME_TZ") or "UTC"

    # Dropdown exit animation; presentation only
    CLOSE_DELAY_MS = _env_int("LINGUATIME_CLOSE_DELAY_MS", 200)

    # Hosted picker sessions: idle ones are dropped, and the oldest go first past the cap
    PICKER_IDLE_SECONDS = _env_int("LINGUATIME_PICKER_IDLE_SECONDS", 1800)
    MAX_PICKERS = _env_int("LINGUATIME_MAX_PICKERS", 1000)

    # Showcase parse history length
    HISTORY_SIZE = _env_int("LINGUATIME_HISTORY_SIZE", 5)

    # Web server
    HOST = os.environ.get("LINGUATIME_HOST", "127.0.0.1")
    PORT = _env_int("LINGUATIME_PORT", 8000)
    LOG_LEVEL = os.environ.get("LINGUATIME_LOG_LEVEL", "INFO").upper()

    DEFAULT_SUGGESTIONS = (
        "Tomorrow",
        "Tomorrow morning",
        "Tomorrow night",
        "Next Monday",
        "Next Sunday",
    )
