"""
Output Writer - keeps the results file in step with the in-memory result log
"""

import json
import logging
from pathlib import Path
from typing import Iterator, List
from models import JobRecord

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes the full JSON array of job records, overwriting the file each time"""

    def __init__(self, results_path: Path):
        self.results_path = Path(results_path)

    def _ensure_output_dir(self, path: Path) -> None:
        """Create output directory if it doesn't exist"""
        path.parent.mkdir(parents=True, exist_ok=True)

    def write_json(self, records: List[JobRecord]) -> Path:
        """Rewrite the results file with every record so far"""
        self._ensure_output_dir(self.results_path)
        payload = [record.to_json() for record in records]
        # Readers only ever see a complete file
        tmp_path = self.results_path.with_name(self.results_path.name + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.results_path)
        return self.results_path

    def read_json(self) -> List[JobRecord]:
        """Load records back from the results file"""
        if not self.results_path.exists():
            return []
        data = json.loads(self.results_path.read_text(encoding="utf-8"))
        return [JobRecord.model_validate(item) for item in data]


class ResultLog:
    """Ordered, append-only job records, checkpointed after every append"""

    def __init__(self, writer: OutputWriter):
        self.writer = writer
        self.records: List[JobRecord] = []
        self.save_failures = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[JobRecord]:
        return iter(self.records)

    def append(self, record: JobRecord) -> None:
        expected = len(self.records) + 1
        if record.job_index != expected:
            raise ValueError(f"Expected job index {expected}, got {record.job_index}")
        self.records.append(record)
        self.save()

    def save(self) -> bool:
        try:
            path = self.writer.write_json(self.records)
            logger.info(f"Progress saved to {path}")
            return True
        except (OSError, TypeError, ValueError) as exc:
            self.save_failures += 1
            logger.error(f"Failed to save progress: {exc}")
            return False
