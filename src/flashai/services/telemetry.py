from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping


@dataclass
class TelemetryService:
    """Append-only JSONL event log under the user-data directory."""

    path: Path
    context: dict[str, object] = field(default_factory=dict)

    def bind(self, **context: object) -> None:
        """Attach fields (e.g. the logged-in user) to every later record."""
        for k, v in context.items():
            if v is None:
                self.context.pop(k, None)
            else:
                self.context[k] = v

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        if self.context:
            rec["context"] = dict(self.context)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
