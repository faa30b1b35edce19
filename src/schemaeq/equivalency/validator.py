"""Host engine that offers comparands to an ordered list of equivalency steps."""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from schemaeq.equivalency.context import Comparands, EquivalencyValidationContext
from schemaeq.equivalency.execution import escape, format_value, join_using_writing_style
from schemaeq.types import EquivalencyResult

logger = logging.getLogger(__name__)

_SIMPLE_TYPES = (str, bytes, int, float, bool, Enum, type(None))


class EquivalencyStep:
    """Base class for a step that knows how to compare one kind of expectation.

    Subclasses set ``handled_type`` and implement :meth:`on_handle`. Comparands
    whose expectation is not an instance of ``handled_type`` are passed on to
    the next step.
    """

    handled_type: Any = object

    def handle(
        self,
        comparands: Comparands,
        context: EquivalencyValidationContext,
        validator: "EquivalencyValidator",
    ) -> EquivalencyResult:
        if not isinstance(comparands.expectation, self.handled_type):
            return EquivalencyResult.CONTINUE_WITH_NEXT
        return self.on_handle(comparands, context, validator)

    def on_handle(
        self,
        comparands: Comparands,
        context: EquivalencyValidationContext,
        validator: "EquivalencyValidator",
    ) -> EquivalencyResult:
        raise NotImplementedError

    def __str__(self) -> str:
        return type(self).__name__


class EquivalencyValidator:
    """Walks comparands through the configured steps.

    Guards against runaway recursion with the options' maximum depth and
    against cycles by remembering which (subject, expectation) pairs are being
    compared on the current path.
    """

    def __init__(self) -> None:
        self._in_progress: set[tuple[int, int]] = set()

    def assert_equivalency_of(
        self, comparands: Comparands, context: EquivalencyValidationContext
    ) -> None:
        """Compare one pair, recording failures on the context's chain."""
        options = context.options
        node = context.current_node
        chain = context.chain.for_context(context)

        if node.depth > options.max_recursion_depth:
            chain.fail_with(
                "The maximum recursion depth of {0} was reached.",
                options.max_recursion_depth,
            )
            return

        key = (id(comparands.subject), id(comparands.expectation))
        trackable = not isinstance(comparands.expectation, _SIMPLE_TYPES)
        if trackable and key in self._in_progress:
            logger.debug(f"Cyclic reference at {node.path or '<root>'}, skipping")
            return

        if trackable:
            self._in_progress.add(key)
        try:
            for step in options.steps:
                result = step.handle(comparands, context, self)
                if result is EquivalencyResult.EQUIVALENCY_PROVEN:
                    return
            chain.fail_with(
                "No equivalency step was able to handle {context:object} of type {0}.",
                comparands.runtime_type,
            )
        finally:
            if trackable:
                self._in_progress.discard(key)


class MappingEquivalencyStep(EquivalencyStep):
    """Compare dictionaries key by key."""

    handled_type = Mapping

    def on_handle(self, comparands, context, validator):
        chain = context.chain.for_context(context)
        subject = comparands.subject
        expectation = comparands.expectation

        if not isinstance(subject, Mapping):
            chain.fail_with(
                "Expected {context:dictionary} to be a dictionary{reason}, but found {0}.",
                subject,
            )
            return EquivalencyResult.EQUIVALENCY_PROVEN

        missing = [key for key in expectation if key not in subject]
        extra = [key for key in subject if key not in expectation]

        if missing:
            chain.fail_with(
                "Expected {context:dictionary} to contain "
                + _keys_phrase(missing)
                + "{reason}, but it does not."
            )
        if extra:
            chain.fail_with(
                "Did not expect {context:dictionary} to contain "
                + _keys_phrase(extra)
                + "{reason}, but it does."
            )

        for key, expected_value in expectation.items():
            if key in subject:
                validator.assert_equivalency_of(
                    Comparands(subject=subject[key], expectation=expected_value),
                    context.as_item(format_value(key)),
                )

        return EquivalencyResult.EQUIVALENCY_PROVEN


def _keys_phrase(keys: list[Any]) -> str:
    noun = "key" if len(keys) == 1 else "keys"
    return f"{noun} " + escape(join_using_writing_style(format_value(k) for k in keys))


class SequenceEquivalencyStep(EquivalencyStep):
    """Compare lists and tuples item by item, in order."""

    handled_type = (list, tuple)

    def on_handle(self, comparands, context, validator):
        chain = context.chain.for_context(context)
        subject = comparands.subject
        expectation = comparands.expectation

        if not isinstance(subject, (list, tuple)):
            chain.fail_with(
                "Expected {context:collection} to be a collection{reason}, but found {0}.",
                subject,
            )
            return EquivalencyResult.EQUIVALENCY_PROVEN

        chain.for_condition(len(subject) == len(expectation)).fail_with(
            "Expected {context:collection} to contain {0} item(s){reason}, but found {1}.",
            len(expectation),
            len(subject),
        )

        for index, (actual, expected) in enumerate(zip(subject, expectation)):
            validator.assert_equivalency_of(
                Comparands(subject=actual, expectation=expected),
                context.as_item(index),
            )

        return EquivalencyResult.EQUIVALENCY_PROVEN


class SimpleEqualityStep(EquivalencyStep):
    """Fallback that compares with ``==``."""

    def on_handle(self, comparands, context, validator):
        chain = context.chain.for_context(context)
        chain.for_condition(comparands.subject == comparands.expectation).fail_with(
            "Expected {context:value} to be {0}{reason}, but found {1}.",
            comparands.expectation,
            comparands.subject,
        )
        return EquivalencyResult.EQUIVALENCY_PROVEN
