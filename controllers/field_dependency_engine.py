# -*- coding: utf-8 -*-
"""
Field Dependency Engine
=======================
Derived form fields.

A FieldDependencyRule says "when ``trigger`` changes, recompute ``targets``
from the current values". Rules form a directed graph from trigger to
targets which must stay acyclic; a rule that would close a cycle is
rejected when it is registered.

``recompute`` runs every rule reachable from the changed field in
topological order against a working copy of the values and returns all
updated fields as one mapping, so a caller never observes e.g. a tax
computed from an older subtotal.

Targets are always overwritten, including fields the user edited by hand
after an earlier trigger fired.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence, Set, Tuple

from services.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)

ComputeFn = Callable[[Mapping[str, Any]], Mapping[str, Any]]


@dataclass(frozen=True)
class FieldDependencyRule:
    """
    Recompute ``targets`` whenever ``trigger`` changes.

    ``compute`` must be a pure function of the values it receives. Declared
    targets missing from its result are reset to None; undeclared keys are
    ignored.
    """
    trigger: str
    targets: Tuple[str, ...]
    compute: ComputeFn

    def __post_init__(self):
        # Accept any sequence for targets; store a de-duplicated tuple
        object.__setattr__(self, "targets", tuple(dict.fromkeys(self.targets)))
        if not self.targets:
            raise ConfigurationError(f"Rule on '{self.trigger}' declares no targets")


class FieldDependencyEngine:
    """Directed, acyclic graph of field dependency rules."""

    def __init__(self, rules: Sequence[FieldDependencyRule] = ()):
        self._rules: List[FieldDependencyRule] = []
        self._by_trigger: Dict[str, List[FieldDependencyRule]] = {}
        for rule in rules:
            self.register(rule)

    @property
    def rules(self) -> List[FieldDependencyRule]:
        return list(self._rules)

    def has_rules_for(self, field: str) -> bool:
        return field in self._by_trigger

    def register(self, rule: FieldDependencyRule):
        """
        Add a rule to the graph.

        Raises:
            ConfigurationError: the rule would introduce a cycle
        """
        if rule.trigger in rule.targets:
            raise ConfigurationError(
                f"Rule on '{rule.trigger}' targets its own trigger"
            )

        # A cycle appears iff the trigger is reachable from one of the new targets
        for target in rule.targets:
            path = self._find_path(target, rule.trigger)
            if path:
                cycle = " -> ".join([rule.trigger] + path)
                raise ConfigurationError(f"Field dependency cycle: {cycle}")

        self._rules.append(rule)
        self._by_trigger.setdefault(rule.trigger, []).append(rule)
        logger.debug(f"Registered rule {rule.trigger} -> {list(rule.targets)}")

    def _find_path(self, start: str, goal: str) -> List[str]:
        """Fields from start to goal along existing edges, or [] if unreachable."""
        parents: Dict[str, str] = {start: ""}
        queue = deque([start])
        while queue:
            field = queue.popleft()
            if field == goal:
                path = [field]
                while parents[path[-1]]:
                    path.append(parents[path[-1]])
                return list(reversed(path))
            for rule in self._by_trigger.get(field, []):
                for target in rule.targets:
                    if target not in parents:
                        parents[target] = field
                        queue.append(target)
        return []

    def _affected_rules(self, trigger_field: str) -> List[FieldDependencyRule]:
        """All rules reachable from the trigger, in breadth-first discovery order."""
        seen: Set[str] = {trigger_field}
        queue = deque([trigger_field])
        affected: List[FieldDependencyRule] = []
        while queue:
            field = queue.popleft()
            for rule in self._by_trigger.get(field, []):
                if rule not in affected:
                    affected.append(rule)
                for target in rule.targets:
                    if target not in seen:
                        seen.add(target)
                        queue.append(target)
        return affected

    def _topological_order(self, rules: List[FieldDependencyRule]) -> List[FieldDependencyRule]:
        """
        Order rules so that every rule producing a field runs before the
        rules triggered by it. Ties keep registration order.
        """
        position = {id(rule): index for index, rule in enumerate(self._rules)}
        producers: Dict[str, List[FieldDependencyRule]] = {}
        for rule in rules:
            for target in rule.targets:
                producers.setdefault(target, []).append(rule)

        pending = {id(rule): len(producers.get(rule.trigger, [])) for rule in rules}
        ready = sorted(
            (rule for rule in rules if pending[id(rule)] == 0),
            key=lambda r: position[id(r)]
        )
        ordered: List[FieldDependencyRule] = []
        while ready:
            rule = ready.pop(0)
            ordered.append(rule)
            for dependent in rules:
                if dependent.trigger in rule.targets:
                    pending[id(dependent)] -= 1
                    if pending[id(dependent)] == 0:
                        ready.append(dependent)
                        ready.sort(key=lambda r: position[id(r)])
        return ordered

    def recompute(self, trigger_field: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Recompute every field that depends (transitively) on ``trigger_field``.

        Args:
            trigger_field: The field that just changed
            values: Current form values (not modified)

        Returns:
            Mapping of every recomputed field to its new value
        """
        rules = self._topological_order(self._affected_rules(trigger_field))
        if not rules:
            return {}

        working = dict(values)
        updates: Dict[str, Any] = {}
        for rule in rules:
            result = rule.compute(working) or {}
            for target in rule.targets:
                working[target] = result.get(target)
                updates[target] = working[target]

        logger.debug(f"Recomputed from '{trigger_field}': {sorted(updates)}")
        return updates
