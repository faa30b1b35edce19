"""Member discovery, selection and matching.

Selection rules decide which attributes of the expectation take part in a
comparison; matching rules locate the corresponding attribute on the subject.
Both are ordered lists held by :class:`EquivalencyOptions`.
"""

import dataclasses
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from schemaeq.equivalency.execution import AssertionChain
    from schemaeq.equivalency.options import EquivalencyOptions

__all__ = [
    "Node",
    "Member",
    "discover_members",
    "MemberSelectionContext",
    "MemberSelectionRule",
    "AllPublicMembersSelectionRule",
    "IncludeMemberByNameRule",
    "ExcludeMemberByNameRule",
    "MemberMatchingRule",
    "MappedMemberMatchingRule",
    "TryMatchByNameRule",
    "MustMatchByNameRule",
]


@dataclass(frozen=True)
class Node:
    """Position in the object graph being compared."""

    path: str = ""
    description: Optional[str] = None
    depth: int = 0

    @classmethod
    def root(cls, description: Optional[str] = None) -> "Node":
        return cls(path=description or "", description=description)

    def child(self, name: str) -> "Node":
        path = f"{self.path}.{name}" if self.path else name
        return Node(path=path, description=path, depth=self.depth + 1)

    def item(self, key: Any) -> "Node":
        path = f"{self.path}[{key}]"
        return Node(path=path, description=path, depth=self.depth + 1)

    @property
    def is_root(self) -> bool:
        return self.depth == 0


@dataclass(frozen=True)
class Member:
    """A named attribute of a type, positioned in the graph."""

    name: str
    declaring_type: type
    type: Any = None
    path: str = ""

    def get_value(self, obj: Any) -> Any:
        return getattr(obj, self.name)


def discover_members(cls: type, node: Optional[Node] = None) -> list[Member]:
    """List the public members of ``cls`` in declaration order.

    Dataclasses expose their fields; other classes expose annotated attributes
    collected across the MRO, base classes first.
    """
    if dataclasses.is_dataclass(cls):
        entries = [(f.name, f.type) for f in dataclasses.fields(cls)]
    else:
        annotations: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            annotations.update(inspect.get_annotations(klass))
        entries = list(annotations.items())

    parent = node or Node()
    return [
        Member(name=name, declaring_type=cls, type=tp, path=parent.child(name).path)
        for name, tp in entries
        if not name.startswith("_")
    ]


@dataclass(frozen=True)
class MemberSelectionContext:
    """Types and options a selection rule resolves members against."""

    compile_time_type: type
    runtime_type: type
    options: "EquivalencyOptions"

    @property
    def type(self) -> type:
        if self.options.use_runtime_typing:
            return self.runtime_type
        return self.compile_time_type


class MemberSelectionRule:
    """Base class for rules that add or remove selected members."""

    def select_members(
        self,
        current_node: Node,
        selected_members: list[Member],
        context: MemberSelectionContext,
    ) -> list[Member]:
        raise NotImplementedError


class AllPublicMembersSelectionRule(MemberSelectionRule):
    """Select every public member of the type."""

    def select_members(self, current_node, selected_members, context):
        names = {m.name for m in selected_members}
        discovered = discover_members(context.type, current_node)
        return selected_members + [m for m in discovered if m.name not in names]

    def __str__(self) -> str:
        return "Include all public members"


class IncludeMemberByNameRule(MemberSelectionRule):
    """Select one member by name, if the type has it."""

    def __init__(self, name: str):
        self.name = name

    def select_members(self, current_node, selected_members, context):
        if any(m.name == self.name for m in selected_members):
            return selected_members
        discovered = discover_members(context.type, current_node)
        return selected_members + [m for m in discovered if m.name == self.name]

    def __str__(self) -> str:
        return f"Include member {self.name}"


class ExcludeMemberByNameRule(MemberSelectionRule):
    """Drop one member by name from the selection."""

    def __init__(self, name: str):
        self.name = name

    def select_members(self, current_node, selected_members, context):
        return [m for m in selected_members if m.name != self.name]

    def __str__(self) -> str:
        return f"Exclude member {self.name}"


def _subject_member(subject: Any, name: str, expectation_member: Member) -> Optional[Member]:
    if not hasattr(subject, name):
        return None
    declared = {m.name: m for m in discover_members(type(subject))}
    tp = declared[name].type if name in declared else expectation_member.type
    return Member(
        name=name,
        declaring_type=type(subject),
        type=tp,
        path=expectation_member.path,
    )


class MemberMatchingRule:
    """Base class for rules that find the subject member for an expectation member."""

    def match(
        self,
        expectation_member: Member,
        subject: Any,
        current_node: Node,
        options: "EquivalencyOptions",
        chain: "AssertionChain",
    ) -> Optional[Member]:
        raise NotImplementedError


class MappedMemberMatchingRule(MemberMatchingRule):
    """Match an expectation member to a differently named subject member."""

    def __init__(self, expectation_name: str, subject_name: str):
        self.expectation_name = expectation_name
        self.subject_name = subject_name

    def match(self, expectation_member, subject, current_node, options, chain):
        if expectation_member.name != self.expectation_name:
            return None
        return _subject_member(subject, self.subject_name, expectation_member)

    def __str__(self) -> str:
        return f"Match {self.expectation_name} to subject member {self.subject_name}"


class TryMatchByNameRule(MemberMatchingRule):
    """Match by identical name; absence is not a failure."""

    def match(self, expectation_member, subject, current_node, options, chain):
        return _subject_member(subject, expectation_member.name, expectation_member)

    def __str__(self) -> str:
        return "Try to match member by name"


class MustMatchByNameRule(MemberMatchingRule):
    """Match by identical name and record a failure when the subject lacks it."""

    def match(self, expectation_member, subject, current_node, options, chain):
        found = _subject_member(subject, expectation_member.name, expectation_member)
        if found is None:
            chain.fail_with(
                "Expectation has member {0} that the other object does not have.",
                expectation_member.path or expectation_member.name,
            )
        return found

    def __str__(self) -> str:
        return "Match member by name (or fail)"
