from __future__ import annotations


class GuildsmithError(Exception):
    """Base class for errors surfaced to command callers."""
    pass


class BlueprintValidationError(GuildsmithError):
    """Raised when a blueprint is malformed or schema-incomplete."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid blueprint: " + "; ".join(self.problems))


class TemplateNotFoundError(GuildsmithError):
    """Raised when a template id does not resolve to a blueprint file."""
    pass


class GenerationError(GuildsmithError):
    """Raised when the text-generation service fails or returns unusable output."""
    pass


class StateStoreError(GuildsmithError):
    """Raised when persisted resource-key state cannot be read or written."""
    pass


class BuildError(GuildsmithError):
    """Raised when a fatal remote failure aborts a build."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step} failed: {message}")


class EditCommandError(GuildsmithError):
    """Raised when a text edit command does not match the supported grammar."""

    def __init__(self, line: str, usage: str) -> None:
        self.line = line
        self.usage = usage
        super().__init__(f'I didn\'t understand "{line}". Try:\n{usage}')
