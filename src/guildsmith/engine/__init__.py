"""
Build and edit engines.

Blueprint builds create key-addressed resources and record them in the
State Store; edit batches mutate live resources found by name.
"""

from .actions import ACTION_TYPES, EditAction, action_from_dict, actions_from_list
from .builder import BlueprintBuilder
from .editor import EditEngine
from .rate_limiter import RateLimiter
from .reporting import format_summary, send_safe_followup
from .results import ActionOutcome, ActionStatus, BuildResult, StepOutcome, StepStatus
from .text_commands import parse_edit_command

__all__ = [
    "ACTION_TYPES",
    "EditAction",
    "action_from_dict",
    "actions_from_list",
    "BlueprintBuilder",
    "EditEngine",
    "RateLimiter",
    "format_summary",
    "send_safe_followup",
    "ActionOutcome",
    "ActionStatus",
    "BuildResult",
    "StepOutcome",
    "StepStatus",
    "parse_edit_command",
]
