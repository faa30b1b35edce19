"""Comparands and the validation context threaded through every step."""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from schemaeq.equivalency.execution import AssertionChain
from schemaeq.equivalency.members import Member, Node

if TYPE_CHECKING:
    from schemaeq.equivalency.options import EquivalencyOptions


@dataclass
class Comparands:
    """The (subject, expectation) pair presented for one equivalence check."""

    subject: Any
    expectation: Any
    compile_time_type: Any = None

    @property
    def runtime_type(self) -> type:
        """Type of the expectation as discovered at runtime."""
        if self.expectation is None:
            return self.compile_time_type or object
        return type(self.expectation)


@dataclass(frozen=True)
class EquivalencyValidationContext:
    """Current node, options and failure chain for one level of the comparison."""

    current_node: Node
    options: "EquivalencyOptions"
    chain: AssertionChain

    def as_nested_member(self, member: Member) -> "EquivalencyValidationContext":
        """Context for comparing the value of ``member`` one level down."""
        return replace(self, current_node=self.current_node.child(member.name))

    def as_item(self, key: Any) -> "EquivalencyValidationContext":
        """Context for comparing the item stored under ``key``."""
        return replace(self, current_node=self.current_node.item(key))
