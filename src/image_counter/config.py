"""
Configuration for a single counting invocation.
"""
from __future__ import annotations

from dataclasses import dataclass

from image_counter.errors import ConfigError

DEFAULT_MAX_DEPTH = 2
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "ImageCounter/1.0"


@dataclass(frozen=True, slots=True)
class CountConfig:
    """Read-only settings supplied once per invocation."""
    root: str
    max_depth: int = DEFAULT_MAX_DEPTH
    diagnostics_enabled: bool = False
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    workers: int = 1

    @property
    def concurrent(self) -> bool:
        return self.workers > 1

    def validate(self) -> "CountConfig":
        """Raise ConfigError if any setting is unusable, otherwise return self."""
        if not self.root or not self.root.strip():
            raise ConfigError("A root folder or URL is required")
        # bool is an int subclass; reject it explicitly
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigError(f"Max depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 1:
            raise ConfigError(f"Max depth must be at least 1, got {self.max_depth}")
        if self.timeout_s <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout_s}")
        if self.workers < 1:
            raise ConfigError(f"Workers must be at least 1, got {self.workers}")
        return self
