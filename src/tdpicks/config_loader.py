"""Persist and load CSV column-mapping profiles for the input tables."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict


@dataclass
class MappingProfile:
    volume_mapping: Dict[str, str] = field(default_factory=dict)
    touchdown_mapping: Dict[str, str] = field(default_factory=dict)
    defense_mapping: Dict[str, str] = field(default_factory=dict)
    schedule_mapping: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "MappingProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            volume_mapping=data.get("volume_mapping", {}),
            touchdown_mapping=data.get("touchdown_mapping", {}),
            defense_mapping=data.get("defense_mapping", {}),
            schedule_mapping=data.get("schedule_mapping", {}),
        )

    def save(self, path: Path) -> None:
        payload = {
            "volume_mapping": self.volume_mapping,
            "touchdown_mapping": self.touchdown_mapping,
            "defense_mapping": self.defense_mapping,
            "schedule_mapping": self.schedule_mapping,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
