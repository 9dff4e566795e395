"""Configuration defaults and .env loading.

WHY: People converting a batch of logs from the same server want to set
the timezone, channel and dialects once instead of repeating flags.
Defaults live here as plain module constants so both humans and tests
can find and override them.

HOW: python-dotenv loads the .env file on import. Each default reads an
``IRCLOG_*`` environment variable with a fallback. CLI flags always win
over these values.

RULES:
- IRCLOG_TZ: seconds WEST of UTC, integer (default 0)
- IRCLOG_CHANNEL: channel override, empty means none
- IRCLOG_INPUT_FORMAT / IRCLOG_OUTPUT_FORMAT: default dialect names
- IRCLOG_TOP: number of speakers printed by ``freq`` (default 10)
- A malformed integer raises ValueError with the variable name
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the working directory (where the command is run from)
load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))


def load_timezone_offset() -> int:
    """Read IRCLOG_TZ (seconds west of UTC).

    Raises:
        ValueError: If the variable is set but not an integer.
    """
    return _int_env("IRCLOG_TZ", 0)


def load_channel() -> Optional[str]:
    """Read IRCLOG_CHANNEL; empty or unset means no override."""
    return os.getenv("IRCLOG_CHANNEL", "").strip() or None


DEFAULT_INPUT_FORMAT = os.getenv("IRCLOG_INPUT_FORMAT", "irssi")
DEFAULT_OUTPUT_FORMAT = os.getenv("IRCLOG_OUTPUT_FORMAT", "binary")
STATS_TOP_N = _int_env("IRCLOG_TOP", 10)
