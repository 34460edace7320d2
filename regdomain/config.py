from __future__ import annotations
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

@dataclass
class Config:
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Optional[str]) -> "Config":
        """Load a YAML config file; no path means all defaults."""
        if not path:
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(data=data or {})

    def __getitem__(self, item):
        return self.data[item]

    def get(self, key, default=None):
        return self.data.get(key, default)

    def section(self, key: str) -> Dict[str, Any]:
        """Nested mapping under ``key``, empty if missing or null."""
        return self.data.get(key) or {}
