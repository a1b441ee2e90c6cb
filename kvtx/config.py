"""
kvtx configuration module.

Provides the settings for the interactive shell: prompt text, verb
matching, and the log level applied when the shell configures logging.

Example:
    from kvtx.config import KVConfig

    config = KVConfig(prompt="kv> ", log_level="DEBUG")

    # Or pick up KVTX_* environment variables
    config = KVConfig.from_env()
"""

import logging
import os
from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional

DEFAULT_PROMPT = "> "
DEFAULT_LOG_LEVEL = "WARNING"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_PROMPT = "KVTX_PROMPT"
ENV_LOG_LEVEL = "KVTX_LOG_LEVEL"
ENV_DEBUG = "KVTX_DEBUG"


@dataclass
class KVConfig:
    """
    Configuration for a kvtx session and its shell.

    Attributes:
        prompt: Text written before each line is read (default: "> ")
        case_sensitive_verbs: If False, "read" and "READ" are the same verb
        log_level: Level name handed to logging.basicConfig by the shell
    """

    prompt: str = DEFAULT_PROMPT
    case_sensitive_verbs: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        self._validate()

    def _validate(self):
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, "
                f"got {self.log_level!r}"
            )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for log_level."""
        return getattr(logging, self.log_level)

    def to_dict(self) -> Dict:
        """Convert config to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'KVConfig':
        """
        Build a config from KVTX_* environment variables.

        KVTX_DEBUG (any non-empty value) forces DEBUG and wins over
        KVTX_LOG_LEVEL.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            KVConfig with environment overrides applied

        Raises:
            ValueError: If KVTX_LOG_LEVEL names an unknown level
        """
        env = os.environ if environ is None else environ

        log_level = env.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)
        if env.get(ENV_DEBUG):
            log_level = "DEBUG"

        return cls(
            prompt=env.get(ENV_PROMPT, DEFAULT_PROMPT),
            log_level=log_level,
        )


def get_default_config() -> KVConfig:
    """Return a fresh default configuration."""
    return KVConfig()
