from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PingConfig:
    """Parameters of a single run."""

    host: str
    count: int = 10
    timeout: float = 2.0
    show_graph: bool = False
    show_line: bool = False
    json_path: Optional[str] = None
    csv_path: Optional[str] = None
    interval: float = 1.0
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if self.count < 1:
            raise ValueError(f"count must be at least 1, got {self.count}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.interval < 0:
            raise ValueError(f"interval must not be negative, got {self.interval}")

    @property
    def wants_export(self) -> bool:
        return self.json_path is not None or self.csv_path is not None
