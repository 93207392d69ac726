# -*- coding: utf-8 -*-
"""
Tests for the field dependency engine.

Tests cover:
- Cycle rejection at registration
- Transitive recomputation in dependency order
- Overwrite of targets and idempotence
"""

import pytest

from controllers.field_dependency_engine import FieldDependencyEngine, FieldDependencyRule
from services.exceptions import ConfigurationError


def _sum_items(values):
    return {"subtotal": sum(i["qty"] * i["price"] for i in values.get("items") or [])}


def _tax(values):
    return {"tax": round(values["subtotal"] * 0.18, 2)}


def _total(values):
    return {"total": values["subtotal"] + values["tax"]}


@pytest.fixture
def totals_engine():
    # Registered out of dependency order on purpose
    return FieldDependencyEngine([
        FieldDependencyRule("tax", ("total",), _total),
        FieldDependencyRule("subtotal", ("tax",), _tax),
        FieldDependencyRule("items", ("subtotal",), _sum_items),
    ])


class TestRegistration:
    """Graph construction."""

    def test_rule_without_targets_rejected(self):
        with pytest.raises(ConfigurationError):
            FieldDependencyRule("a", (), lambda values: {})

    def test_self_dependency_rejected(self):
        engine = FieldDependencyEngine()
        with pytest.raises(ConfigurationError):
            engine.register(FieldDependencyRule("a", ("a",), lambda values: {}))

    def test_cycle_rejected_with_path(self):
        engine = FieldDependencyEngine([
            FieldDependencyRule("a", ("b",), lambda values: {}),
            FieldDependencyRule("b", ("c",), lambda values: {}),
        ])

        with pytest.raises(ConfigurationError, match="a -> b -> c -> a|c -> a -> b -> c"):
            engine.register(FieldDependencyRule("c", ("a",), lambda values: {}))

        # The rejected rule is not kept
        assert len(engine.rules) == 2
        assert not engine.has_rules_for("c")

    def test_diamond_is_not_a_cycle(self):
        engine = FieldDependencyEngine([
            FieldDependencyRule("a", ("b", "c"), lambda values: {}),
            FieldDependencyRule("b", ("d",), lambda values: {}),
        ])
        engine.register(FieldDependencyRule("c", ("d",), lambda values: {}))
        assert len(engine.rules) == 3

    def test_duplicate_targets_collapsed(self):
        rule = FieldDependencyRule("a", ["b", "b", "c"], lambda values: {})
        assert rule.targets == ("b", "c")


class TestRecompute:
    """Derived value computation."""

    def test_purchase_order_totals(self, totals_engine):
        values = {"items": [{"qty": 2, "price": 100}, {"qty": 1, "price": 50}]}

        updates = totals_engine.recompute("items", values)

        assert updates == {"subtotal": 250, "tax": 45.0, "total": 295.0}

    def test_input_values_not_modified(self, totals_engine):
        values = {"items": [{"qty": 1, "price": 10}]}
        totals_engine.recompute("items", values)
        assert values == {"items": [{"qty": 1, "price": 10}]}

    def test_idempotent(self, totals_engine):
        values = {"items": [{"qty": 3, "price": 19.99}]}
        first = totals_engine.recompute("items", values)
        second = totals_engine.recompute("items", {**values, **first})
        assert first == second

    def test_intermediate_trigger_only_recomputes_downstream(self, totals_engine):
        updates = totals_engine.recompute("subtotal", {"subtotal": 100})
        assert updates == {"tax": 18.0, "total": 118.0}

    def test_unrelated_field_recomputes_nothing(self, totals_engine):
        assert totals_engine.recompute("vendor", {"vendor": "Office Plus"}) == {}

    def test_targets_always_overwritten(self):
        catalog = {"AST-1": {"location": "Server Room", "user": "IT Admin"}}
        engine = FieldDependencyEngine([
            FieldDependencyRule(
                "asset_id",
                ("from_location", "from_user"),
                lambda values: {
                    "from_location": catalog[values["asset_id"]]["location"],
                    "from_user": catalog[values["asset_id"]]["user"],
                },
            )
        ])
        values = {"asset_id": "AST-1", "from_location": "edited by hand", "from_user": "me"}

        updates = engine.recompute("asset_id", values)

        assert updates == {"from_location": "Server Room", "from_user": "IT Admin"}

    def test_missing_target_reset_to_none(self):
        engine = FieldDependencyEngine([
            FieldDependencyRule("a", ("b", "c"), lambda values: {"b": 1, "ignored": 2})
        ])
        assert engine.recompute("a", {"a": 0, "c": "stale"}) == {"b": 1, "c": None}

    def test_diamond_sees_both_inputs(self):
        engine = FieldDependencyEngine([
            FieldDependencyRule("a", ("b", "c"), lambda v: {"b": v["a"] + 1, "c": v["a"] * 10}),
            FieldDependencyRule("b", ("d",), lambda v: {"d": v["b"] + v["c"]}),
        ])
        # d depends on b and on c (written by the same rule), so it runs after it
        assert engine.recompute("a", {"a": 2})["d"] == 23
