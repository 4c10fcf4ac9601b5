"""
Configuration for the duplicate check.

The thresholds were tuned empirically on the live question pool, so they
are exposed as environment variables rather than fixed in code.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

ENV_PREFIX = "DUPCHECK_"


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present.

    Existing environment variables win over values from the file.

    Returns:
        True if a file was loaded
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class MatcherConfig:
    """Tunable constants of the matching engine."""

    min_query_length: int = 8
    max_query_tokens: int = 10
    token_threshold: float = 0.18
    dice_threshold: float = 0.32
    max_matches: int = 5
    pool_limit: int = 200

    def __post_init__(self):
        for name in ("min_query_length", "max_query_tokens", "max_matches", "pool_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        for name in ("token_threshold", "dice_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")


_INT_FIELDS = ("min_query_length", "max_query_tokens", "max_matches", "pool_limit")
_FLOAT_FIELDS = ("token_threshold", "dice_threshold")


def load_config(environ: Optional[Mapping[str, str]] = None) -> MatcherConfig:
    """
    Build a MatcherConfig from DUPCHECK_* environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        MatcherConfig with defaults for unset variables

    Raises:
        ValueError: If a variable is set but not a valid number or out of range
    """
    env = os.environ if environ is None else environ
    values = {}
    for name in _INT_FIELDS + _FLOAT_FIELDS:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is None or raw.strip() == "":
            continue
        cast = int if name in _INT_FIELDS else float
        try:
            values[name] = cast(raw.strip())
        except ValueError:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be a number, got {raw!r}") from None
    return MatcherConfig(**values)
