# -*- coding: utf-8 -*-
"""
Tests for the list view controller.

Tests cover:
- Search and facet filtering
- Pagination and page clamping
- Selection tri-state and pruning
- Bulk actions through the coordinator
- Sorting, presets and summaries
"""

import asyncio

import pytest
import pytest_asyncio

from controllers.list_view_controller import BulkAction, ListViewController, SelectionState
from controllers.mutation_coordinator import OptimisticMutationCoordinator


def _ids(items):
    return [item["id"] for item in items]


@pytest.fixture
def view(assets, sink):
    return ListViewController(
        fetch=assets.fetch,
        searchable_fields=("id", "name", "user.name"),
        facets=("status", "category"),
        page_size=10,
        bulk_actions=[
            BulkAction("delete", "Delete", assets.bulk_remove,
                       success_message="{count} asset(s) deleted"),
            BulkAction("update_status", "Update Status", assets.bulk_update),
            BulkAction("broken", "Broken", assets.failing_action),
        ],
        notifier=sink,
    )


@pytest_asyncio.fixture
async def loaded(view):
    await view.load()
    return view


class TestFiltering:

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, make_collection, sink):
        collection = make_collection([
            {"id": "AST-1001", "name": "Laptop"},
            {"id": "AST-1002", "name": "Printer"},
        ])
        view = ListViewController(fetch=collection.fetch, searchable_fields=("id", "name"),
                                  notifier=sink)
        await view.load()

        view.set_search("1002")
        assert _ids(view.filtered_items) == ["AST-1002"]

        view.set_search("ast-100")
        assert view.filtered_count == 2

        view.set_search("LAPTOP")
        assert _ids(view.filtered_items) == ["AST-1001"]

    @pytest.mark.asyncio
    async def test_search_dotted_field(self, loaded):
        loaded.set_search("priya")
        assert _ids(loaded.filtered_items) == ["AST-1001"]

    @pytest.mark.asyncio
    async def test_facets_and_across_or_within(self, loaded):
        loaded.set_filter("status", {"Active", "Retired"})
        loaded.set_filter("category", {"Furniture"})

        for item in loaded.filtered_items:
            assert item["status"] in {"Active", "Retired"}
            assert item["category"] == "Furniture"
        assert loaded.filtered_count == 8

    @pytest.mark.asyncio
    async def test_empty_facet_selection_applies_no_filter(self, loaded):
        loaded.set_filter("status", {"Active"})
        loaded.set_filter("status", set())
        assert loaded.filtered_count == 25

    @pytest.mark.asyncio
    async def test_query_changes_do_not_refetch(self, loaded, assets):
        loaded.set_search("AST")
        loaded.set_filter("status", {"Active"})
        loaded.set_page(1)
        assert len(assets.fetch_calls) == 1

    @pytest.mark.asyncio
    async def test_clear_filters(self, loaded):
        loaded.set_search("1001")
        loaded.set_filter("status", {"Active"})
        loaded.clear_filters()
        assert loaded.filtered_count == 25
        assert loaded.query.search_text == ""


class TestPagination:

    @pytest.mark.asyncio
    async def test_second_page(self, loaded):
        loaded.set_page(1)
        assert loaded.visible_items == loaded.filtered_items[10:20]
        assert len(loaded.visible_items) == 10
        assert loaded.total_pages == 3

    @pytest.mark.asyncio
    async def test_page_clamped(self, loaded):
        loaded.set_page(7)
        assert loaded.query.page == 2
        assert len(loaded.visible_items) == 5

        loaded.set_page(-3)
        assert loaded.query.page == 0

    @pytest.mark.asyncio
    async def test_query_setters_reset_page(self, loaded):
        for change in (
            lambda: loaded.set_search("AST"),
            lambda: loaded.set_filter("category", {"IT Equipment", "Furniture"}),
            lambda: loaded.set_sort("name"),
            lambda: loaded.set_page_size(5),
        ):
            loaded.set_page(1)
            assert loaded.query.page == 1
            change()
            assert loaded.query.page == 0

    @pytest.mark.asyncio
    async def test_page_size_must_be_positive(self, loaded):
        with pytest.raises(ValueError):
            loaded.set_page_size(0)

    def test_empty_collection_has_one_page(self, view):
        view.set_page(4)
        assert view.total_pages == 1
        assert view.query.page == 0
        assert view.visible_items == []


class TestSelection:

    @pytest.mark.asyncio
    async def test_select_all_covers_filtered_set_across_pages(self, loaded):
        loaded.set_filter("status", {"Active"})
        loaded.select_all()

        assert loaded.selected_ids == frozenset(_ids(loaded.filtered_items))
        assert len(loaded.selected_ids) == 9
        assert loaded.selection_state == SelectionState.ALL

    @pytest.mark.asyncio
    async def test_tri_state(self, loaded):
        assert loaded.selection_state == SelectionState.NONE
        loaded.toggle_select("AST-1001")
        assert loaded.selection_state == SelectionState.SOME
        loaded.toggle_select("AST-1001")
        assert loaded.selection_state == SelectionState.NONE

    @pytest.mark.asyncio
    async def test_narrowing_filter_prunes_selection(self, loaded, qtbot):
        loaded.select_all()

        with qtbot.waitSignal(loaded.selection_changed) as blocker:
            loaded.set_filter("category", {"Furniture"})

        expected = frozenset(_ids(loaded.filtered_items))
        assert loaded.selected_ids == expected
        assert blocker.args == [expected]
        assert loaded.selection_state == SelectionState.ALL

    @pytest.mark.asyncio
    async def test_cannot_select_filtered_out_id(self, loaded):
        loaded.set_search("AST-1002")
        loaded.toggle_select("AST-1003")
        assert loaded.selected_ids == frozenset()

    @pytest.mark.asyncio
    async def test_selected_or_filtered(self, loaded):
        loaded.set_filter("status", {"Retired"})
        assert len(loaded.selected_or_filtered()) == 8

        loaded.toggle_select("AST-1003")
        assert _ids(loaded.selected_or_filtered()) == ["AST-1003"]


class TestBulkActions:

    @pytest.mark.asyncio
    async def test_bulk_delete_clears_selection_after_refetch(self, loaded, assets, sink):
        for entity_id in ("AST-1001", "AST-1002", "AST-1003"):
            loaded.toggle_select(entity_id)

        result = await loaded.apply_bulk_action("delete")

        assert result.success
        assert assets.bulk_calls == [("remove", ["AST-1001", "AST-1002", "AST-1003"])]
        assert loaded.selected_ids == frozenset()
        assert {"AST-1001", "AST-1002", "AST-1003"}.isdisjoint(_ids(loaded.items))
        assert len(assets.fetch_calls) == 2
        assert sink.messages("success") == ["3 asset(s) deleted"]

    @pytest.mark.asyncio
    async def test_bulk_failure_changes_nothing(self, loaded, assets):
        loaded.toggle_select("AST-1001")
        snapshot = loaded.items

        result = await loaded.apply_bulk_action("broken")

        assert result.success is False
        assert loaded.items == snapshot
        assert loaded.selected_ids == frozenset({"AST-1001"})
        assert len(assets.fetch_calls) == 1

    @pytest.mark.asyncio
    async def test_bulk_action_params(self, loaded, assets):
        result = await loaded.apply_bulk_action(
            "update_status", ["AST-1004"], status="In Repair"
        )

        assert result.success
        assert assets.bulk_calls == [("update", ["AST-1004"], {"status": "In Repair"})]
        updated = [item for item in loaded.items if item["id"] == "AST-1004"]
        assert updated[0]["status"] == "In Repair"

    @pytest.mark.asyncio
    async def test_reentrant_bulk_action_ignored(self, assets, sink):
        gate = asyncio.Event()
        calls = []

        async def slow(ids):
            calls.append(ids)
            await gate.wait()

        view = ListViewController(fetch=assets.fetch, notifier=sink,
                                  bulk_actions=[BulkAction("slow", "Slow", slow)])
        await view.load()
        view.toggle_select("AST-1001")

        first = asyncio.ensure_future(view.apply_bulk_action("slow"))
        await asyncio.sleep(0)
        assert view.is_bulk_pending
        assert await view.apply_bulk_action("slow") is None
        gate.set()
        await first

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unknown_action_and_empty_selection(self, loaded):
        assert (await loaded.apply_bulk_action("archive")).success is False
        assert (await loaded.apply_bulk_action("delete")).success is False


class TestSortingAndPresets:

    @pytest.mark.asyncio
    async def test_sort_missing_values_last(self, make_collection, sink):
        collection = make_collection([
            {"id": "c", "value": 3}, {"id": "n", "value": None},
            {"id": "a", "value": 1}, {"id": "b", "value": 2},
        ])
        view = ListViewController(fetch=collection.fetch, notifier=sink)
        await view.load()

        view.set_sort("value")
        assert _ids(view.filtered_items) == ["a", "b", "c", "n"]

        view.set_sort("value", descending=True)
        assert _ids(view.filtered_items) == ["c", "b", "a", "n"]

    @pytest.mark.asyncio
    async def test_presets(self, loaded):
        loaded.set_filter("status", {"Active"})
        loaded.set_sort("name", descending=True)
        loaded.save_preset("active")
        loaded.clear_filters()

        assert loaded.apply_preset("active") is True
        assert loaded.query.active_filters == {"status": frozenset({"Active"})}
        assert loaded.query.sort_descending is True
        assert loaded.presets == ["active"]
        assert loaded.apply_preset("missing") is False

    @pytest.mark.asyncio
    async def test_facet_counts_over_full_snapshot(self, loaded):
        loaded.set_search("AST-1001")
        assert loaded.facet_counts("status") == {"Active": 9, "In Repair": 8, "Retired": 8}


class TestSharedSnapshot:

    @pytest.mark.asyncio
    async def test_views_share_coordinator(self, assets, sink):
        coordinator = OptimisticMutationCoordinator(fetch=assets.fetch, notifier=sink)
        first = ListViewController(coordinator=coordinator, notifier=sink)
        second = ListViewController(coordinator=coordinator, notifier=sink)

        await first.load()

        assert second.filtered_count == 25

    @pytest.mark.asyncio
    async def test_disposed_view_ignores_snapshots(self, assets, sink):
        coordinator = OptimisticMutationCoordinator(fetch=assets.fetch, notifier=sink)
        view = ListViewController(coordinator=coordinator, notifier=sink)
        view.dispose()

        await coordinator.refetch()

        assert view.filtered_count == 0
