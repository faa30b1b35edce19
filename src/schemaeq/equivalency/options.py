"""Equivalency options: selection rules, matching rules and steps."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import yaml

from schemaeq.equivalency.constraint import ConstraintEquivalencyStep
from schemaeq.equivalency.members import (
    AllPublicMembersSelectionRule,
    ExcludeMemberByNameRule,
    IncludeMemberByNameRule,
    MappedMemberMatchingRule,
    MemberMatchingRule,
    MemberSelectionRule,
    MustMatchByNameRule,
)
from schemaeq.equivalency.validator import (
    EquivalencyStep,
    MappingEquivalencyStep,
    SequenceEquivalencyStep,
    SimpleEqualityStep,
)
from schemaeq.exceptions import ConfigError

DEFAULT_MAX_RECURSION_DEPTH = 10

VALID_OPTION_FIELDS = {
    "excluding",
    "including",
    "mappings",
    "max_recursion_depth",
}


def default_steps() -> list[EquivalencyStep]:
    """Steps in the order the engine offers comparands to them."""
    return [
        ConstraintEquivalencyStep(),
        MappingEquivalencyStep(),
        SequenceEquivalencyStep(),
        SimpleEqualityStep(),
    ]


@dataclass
class EquivalencyOptions:
    """Rules and limits for one equivalency assertion.

    The builder methods mutate and return ``self`` so calls can be chained::

        EquivalencyOptions().excluding("columns").with_mapping("extended_properties", "props")
    """

    selection_rules: list[MemberSelectionRule] = field(
        default_factory=lambda: [AllPublicMembersSelectionRule()]
    )
    matching_rules: list[MemberMatchingRule] = field(
        default_factory=lambda: [MustMatchByNameRule()]
    )
    steps: list[EquivalencyStep] = field(default_factory=default_steps)
    max_recursion_depth: int = DEFAULT_MAX_RECURSION_DEPTH
    use_runtime_typing: bool = True

    def excluding(self, name: str) -> "EquivalencyOptions":
        """Leave the named member out of every comparison."""
        self.selection_rules.append(ExcludeMemberByNameRule(name))
        return self

    def including(self, name: str) -> "EquivalencyOptions":
        """Compare only explicitly included members from now on."""
        self.selection_rules = [
            rule
            for rule in self.selection_rules
            if not isinstance(rule, AllPublicMembersSelectionRule)
        ]
        self.selection_rules.append(IncludeMemberByNameRule(name))
        return self

    def with_mapping(self, expectation_name: str, subject_name: str) -> "EquivalencyOptions":
        """Match an expectation member against a differently named subject member."""
        self.matching_rules.insert(
            0, MappedMemberMatchingRule(expectation_name, subject_name)
        )
        return self

    def with_max_recursion_depth(self, depth: int) -> "EquivalencyOptions":
        if depth < 0:
            raise ConfigError(f"max_recursion_depth must be >= 0, got {depth}")
        self.max_recursion_depth = depth
        return self

    def using_step(self, step: EquivalencyStep) -> "EquivalencyOptions":
        """Offer comparands to ``step`` before any of the built-in steps."""
        self.steps.insert(0, step)
        return self


def load_options(path: Union[str, Path]) -> EquivalencyOptions:
    """Build EquivalencyOptions from a YAML options file.

    Raises:
        ConfigError: If the file is missing, malformed, or has unknown keys.
    """
    options_path = Path(path)
    if not options_path.is_file():
        raise ConfigError(f"Options file does not exist: {options_path}")

    try:
        with open(options_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in options file {options_path}: {e}") from e

    if data is None:
        return EquivalencyOptions()
    if not isinstance(data, dict):
        raise ConfigError(f"Options file {options_path} must contain a mapping")

    unknown_fields = set(data.keys()) - VALID_OPTION_FIELDS
    if unknown_fields:
        raise ConfigError(
            f"Unknown field(s) in options file: {', '.join(sorted(unknown_fields))}"
        )

    options = EquivalencyOptions()
    for name in data.get("including", []) or []:
        options.including(name)
    for name in data.get("excluding", []) or []:
        options.excluding(name)
    for expectation_name, subject_name in (data.get("mappings") or {}).items():
        options.with_mapping(expectation_name, subject_name)

    if "max_recursion_depth" in data:
        depth = data["max_recursion_depth"]
        if not isinstance(depth, int) or isinstance(depth, bool):
            raise ConfigError(f"max_recursion_depth must be an integer, got {depth!r}")
        options.with_max_recursion_depth(depth)

    return options
