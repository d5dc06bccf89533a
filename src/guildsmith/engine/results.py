from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..constants import FAILURE_GLYPH, SUCCESS_GLYPH
from ..services.resource_state_store import ResourceState


class StepStatus(Enum):
    SUCCEEDED = "succeeded"
    IGNORED_FAILURE = "failed_ignorable"
    FATAL = "failed_fatal"


@dataclass(frozen=True)
class StepOutcome:
    step: str
    status: StepStatus
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCEEDED

    @property
    def line(self) -> str:
        glyph = SUCCESS_GLYPH if self.ok else FAILURE_GLYPH
        text = f"{glyph} {self.step}"
        if self.detail:
            text += f": {self.detail}"
        if self.status is StepStatus.IGNORED_FAILURE:
            text += " (ignored)"
        return text


@dataclass
class BuildResult:
    blueprint_name: str
    created: Dict[str, int] = field(default_factory=lambda: {"roles": 0, "categories": 0, "channels": 0})
    reused: Dict[str, int] = field(default_factory=lambda: {"roles": 0, "categories": 0, "channels": 0})
    messages_sent: int = 0
    messages_skipped: int = 0
    steps: List[StepOutcome] = field(default_factory=list)
    state: Optional[ResourceState] = None

    @property
    def ok(self) -> bool:
        return all(s.status is not StepStatus.FATAL for s in self.steps)

    def summary_lines(self) -> List[str]:
        lines = [f"{SUCCESS_GLYPH} Build complete: **{self.blueprint_name}**"]
        for kind in ("roles", "categories", "channels"):
            text = f"{SUCCESS_GLYPH} {kind.capitalize()}: {self.created[kind]} created"
            if self.reused[kind]:
                text += f", {self.reused[kind]} reused"
            lines.append(text)
        text = f"{SUCCESS_GLYPH} Messages: {self.messages_sent} sent"
        if self.messages_skipped:
            text += f", {self.messages_skipped} skipped"
        lines.append(text)
        lines.extend(s.line for s in self.steps if not s.ok)
        return lines


class ActionStatus(Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    GUARDED = "guarded"
    FAILED = "failed"
    UNKNOWN = "unknown_action"


@dataclass(frozen=True)
class ActionOutcome:
    kind: str
    status: ActionStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status is ActionStatus.APPLIED

    def __str__(self) -> str:
        glyph = SUCCESS_GLYPH if self.ok else FAILURE_GLYPH
        return f"{glyph} {self.message}"
