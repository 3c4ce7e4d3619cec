from __future__ import annotations

import csv
import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class SpaceProfiler:
    """
    Event recorder for ManagedSpace.

    Every allocate/release/coalesce outcome becomes one structured record; the
    records can be flushed to disk as JSONL and CSV for later analysis.
    """

    run_id: str
    output_dir: Optional[str] = None
    events: List[Dict[str, object]] = field(default_factory=list)

    def record_event(self, event_type: str, payload: Dict[str, object]) -> None:
        self.events.append(
            {
                "timestamp": time.time(),
                "run_id": self.run_id,
                "event": event_type,
                **payload,
            }
        )

    def counts(self) -> Dict[str, int]:
        return dict(Counter(str(event["event"]) for event in self.events))

    def flush(self) -> Optional[Path]:
        """Write all events to ``<output_dir>/<run_id>.{jsonl,csv}``; return the JSONL path."""
        if not self.output_dir or not self.events:
            return None
        output_path = Path(self.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        jsonl_path = output_path / f"{self.run_id}.jsonl"
        with jsonl_path.open("w", encoding="utf-8") as handle:
            for record in self.events:
                handle.write(json.dumps(record) + "\n")
        fieldnames = sorted({key for event in self.events for key in event.keys()})
        with (output_path / f"{self.run_id}.csv").open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(self.events)
        return jsonl_path
