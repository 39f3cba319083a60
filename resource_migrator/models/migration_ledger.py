from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

SUMMARY_WIDTH = 54


class MigrationOutcome(Enum):
    MIGRATED = "migrated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MigrationLedger:
    """Outcome accounting for a single migration run.

    A ledger is created fresh for every top-level migration, filled in by the batch executor and
    read once at the end to render the summary. Each planned name lands in exactly one bucket.
    """
    title: str
    total: int = 0
    migrated: int = 0
    skipped: int = 0
    # Failed name -> reason, in processing order
    failures: Dict[str, str] = field(default_factory=dict)
    planned: List[str] = field(default_factory=list)
    # Visible resource counts on each side, only known to the diff strategy
    source_total: Optional[int] = None
    target_total: Optional[int] = None
    aborted: bool = False
    show_plan: bool = False
    _outcomes: Dict[str, MigrationOutcome] = field(default_factory=dict, repr=False)

    def plan(self, names: List[str]):
        self.planned = list(names)
        self.total = len(self.planned)

    def record(self, name: str, outcome: MigrationOutcome, reason: Optional[str] = None):
        if name in self._outcomes:
            raise ValueError(f"Outcome for '{name}' already recorded as {self._outcomes[name].value}")
        self._outcomes[name] = outcome
        if outcome is MigrationOutcome.MIGRATED:
            self.migrated += 1
        elif outcome is MigrationOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failures[name] = reason if reason else "unknown failure"

    def record_migrated(self, name: str):
        self.record(name, MigrationOutcome.MIGRATED)

    def record_skipped(self, name: str):
        self.record(name, MigrationOutcome.SKIPPED)

    def record_failed(self, name: str, reason: str):
        self.record(name, MigrationOutcome.FAILED, reason)

    def outcome_of(self, name: str) -> Optional[MigrationOutcome]:
        return self._outcomes.get(name)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def unprocessed(self) -> List[str]:
        return [name for name in self.planned if name not in self._outcomes]

    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> Dict:
        result = {
            "title": self.title,
            "total": self.total,
            "migrated": self.migrated,
            "skipped": self.skipped,
            "failed": self.failed,
            "failures": [{"name": name, "reason": reason} for name, reason in self.failures.items()],
            "aborted": self.aborted,
        }
        if self.source_total is not None:
            result["source_total"] = self.source_total
        if self.target_total is not None:
            result["target_total"] = self.target_total
        return result

    def render(self) -> str:
        rule = "═" * SUMMARY_WIDTH
        lines = ["╔" + rule + "╗", _row(f"{self.title} Summary".center(SUMMARY_WIDTH - 2)), "╠" + rule + "╣"]
        if self.source_total is not None:
            lines.append(_row(f"Visible in Source:          {self.source_total}"))
        if self.target_total is not None:
            lines.append(_row(f"Visible in Target:          {self.target_total}"))
        lines.append(_row(f"Total Candidates:           {self.total}"))
        lines.append(_row(f"Successfully Migrated:      {self.migrated}"))
        lines.append(_row(f"Skipped (Already Exist):    {self.skipped}"))
        lines.append(_row(f"Failed:                     {self.failed}"))
        if self.aborted:
            lines.append(_row("Run aborted before completion"))
        if self.show_plan and self.planned:
            lines.append("╠" + rule + "╣")
            lines.append(_row("Missing in Target:"))
            lines.extend(_row(f"- {name}") for name in self.planned)
        if self.failures:
            lines.append("╠" + rule + "╣")
            lines.append(_row("Failures:"))
            lines.extend(_row(f"- {name} : {reason}") for name, reason in self.failures.items())
        lines.append("╚" + rule + "╝")
        return "\n".join(lines)


def _row(text: str) -> str:
    # Long names and reasons are not truncated, they simply overflow the box
    return "║ " + text.ljust(SUMMARY_WIDTH - 2) + " ║"
