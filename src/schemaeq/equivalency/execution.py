"""Failure accumulation and message formatting for equivalency assertions."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from schemaeq.equivalency.context import EquivalencyValidationContext

_PLACEHOLDER = re.compile(r"\{\{|\}\}|\{(\w+)(?::([^{}]*))?\}")


@dataclass
class Failure:
    """A single recorded inequivalence."""

    message: str
    path: str = ""


def format_value(value: Any) -> str:
    """Render an argument for inclusion in a failure message."""
    if value is None:
        return "<null>"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, Enum):
        return value.name
    return repr(value)


def escape(text: str) -> str:
    """Escape literal braces so text survives template rendering unchanged."""
    return text.replace("{", "{{").replace("}", "}}")


def join_using_writing_style(items: Iterable[Any]) -> str:
    """Join items the way a sentence would: "A", "A and B", "A, B, and C"."""
    words = [str(item) for item in items]
    if not words:
        return ""
    if len(words) == 1:
        return words[0]
    if len(words) == 2:
        return f"{words[0]} and {words[1]}"
    return ", ".join(words[:-1]) + f", and {words[-1]}"


def format_reason(because: str, *because_args: Any) -> str:
    """Build the " because ..." suffix substituted for {reason}."""
    if not because:
        return ""
    reason = because.format(*because_args) if because_args else because
    reason = reason.strip()
    if not reason.startswith("because"):
        reason = f"because {reason}"
    return f" {reason}"


class AssertionChain:
    """Ordered failure accumulator owned by one top-level assertion.

    Views created with :meth:`for_context` share the failure list but render
    ``{context:...}`` with their own node description.
    """

    def __init__(
        self,
        reason: str = "",
        failures: Optional[list[Failure]] = None,
        identifier: Optional[str] = None,
        path: str = "",
    ):
        self.failures: list[Failure] = failures if failures is not None else []
        self._reason = reason
        self._identifier = identifier
        self._path = path

    @classmethod
    def create(cls, because: str = "", *because_args: Any) -> "AssertionChain":
        """Start a new chain for one top-level assertion."""
        return cls(reason=format_reason(because, *because_args))

    def for_context(self, context: "EquivalencyValidationContext") -> "AssertionChain":
        """Return a view of this chain bound to the context's current node."""
        node = context.current_node
        return AssertionChain(
            reason=self._reason,
            failures=self.failures,
            identifier=node.description,
            path=node.path,
        )

    def for_condition(self, condition: bool) -> "_Continuation":
        """Return a continuation that only records when ``condition`` is false."""
        return _Continuation(self, condition)

    def fail_with(self, template: str, *args: Any) -> None:
        """Render ``template`` and append it as a failure."""
        message = self.render(template, *args)
        self.failures.append(Failure(message=message, path=self._path))

    def render(self, template: str, *args: Any) -> str:
        """Substitute positional, context, reason and named placeholders."""

        def replace(match: re.Match) -> str:
            token = match.group(0)
            if token == "{{":
                return "{"
            if token == "}}":
                return "}"
            key, default = match.group(1), match.group(2) or ""
            if key.isdigit():
                index = int(key)
                return format_value(args[index]) if index < len(args) else token
            if key == "reason":
                return self._reason
            if key == "context":
                return self._identifier or default or "object"
            return default

        return _PLACEHOLDER.sub(replace, template)

    @property
    def succeeded(self) -> bool:
        """True while no failure has been recorded."""
        return not self.failures


class _Continuation:
    def __init__(self, chain: AssertionChain, condition: bool):
        self._chain = chain
        self._condition = condition

    def fail_with(self, template: str, *args: Any) -> bool:
        if not self._condition:
            self._chain.fail_with(template, *args)
        return self._condition
