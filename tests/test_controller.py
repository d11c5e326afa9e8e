"""
Tests for the QueryController.

These tests use an in-memory fake source (optionally gated with a threading.Event to
hold a request "in flight") and verify that:
- An empty query searches the default term immediately
- Rapid set_query calls within the quiet period produce exactly one search
- Results from superseded requests never reach the state
- Transport failures and missing records map to the user-facing error messages
- Listeners are notified of every state change
"""

import asyncio
import threading
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

from recipe_finder.controller import (
    DETAILS_FAILED_MESSAGE,
    DETAILS_NOT_FOUND_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    QueryController,
)
from recipe_finder.models import SearchStatus
from recipe_finder.sources.base import BaseRecipeSource, TransportError
from recipe_finder.sources.mealdb_source import MealDBSource

QUIET = 0.05


def raw_meal(recipe_id: str, name: str, ingredient: str = "Chicken", measure: str = "1 kg") -> Dict[str, Any]:
    return {
        "idMeal": recipe_id,
        "strMeal": name,
        "strMealThumb": f"https://example.test/{recipe_id}.jpg",
        "strInstructions": "Cook.\n\nServe.",
        "strIngredient1": ingredient,
        "strMeasure1": measure,
    }


class FakeSource(BaseRecipeSource):
    """In-memory recipe source recording every call."""
    name = "fake"

    def __init__(self, meals: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.meals = meals or {}
        self.search_calls: List[str] = []
        self.lookup_calls: List[str] = []
        self.fail_search = False
        self.fail_lookup = False
        self.gates: Dict[str, threading.Event] = {}

    def gate(self, key: str) -> threading.Event:
        """Hold requests for `key` (a term or an id) until the returned event is set."""
        event = threading.Event()
        self.gates[key] = event
        return event

    def _wait(self, key: str) -> None:
        if key in self.gates:
            assert self.gates[key].wait(timeout=5), f"gate for {key!r} never released"

    def search_by_name(self, term: str) -> List[Dict[str, Any]]:
        self.search_calls.append(term)
        self._wait(term)
        if self.fail_search:
            raise TransportError("boom")
        return self.meals.get(term, [])

    def lookup_by_id(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        self.lookup_calls.append(recipe_id)
        self._wait(recipe_id)
        if self.fail_lookup:
            raise TransportError("boom")
        for meals in self.meals.values():
            for meal in meals:
                if meal.get("idMeal") == recipe_id:
                    return meal
        return None


@pytest.fixture
def source():
    return FakeSource({
        "chicken": [raw_meal("52772", "Teriyaki Chicken Casserole"), raw_meal("52795", "Chicken Handi")],
        "ab": [raw_meal("53000", "Abgoosht", "Lamb", "500g")],
        "pasta": [raw_meal("52771", "Spicy Arrabiata Penne", "penne rigate", "1 pound")],
    })


@pytest.fixture
def controller(source):
    return QueryController(source, quiet_period=QUIET)


async def wait_for_task(task: asyncio.Task) -> None:
    await asyncio.wait_for(task, timeout=5)


class TestSearch:
    """Tests for list search."""

    @pytest.mark.asyncio
    async def test_empty_term_searches_default(self, controller, source):
        await controller.search("")
        assert source.search_calls == ["chicken"]
        assert [r.name for r in controller.state.results] == ["Teriyaki Chicken Casserole", "Chicken Handi"]
        assert controller.state.status.kind == "idle"

    @pytest.mark.asyncio
    async def test_results_are_normalized(self, controller):
        await controller.search("pasta")
        recipe = controller.state.results[0]
        assert recipe.id == "52771"
        assert recipe.ingredients == ["1 pound penne rigate"]
        assert recipe.instructions == ["Cook.", "Serve."]

    @pytest.mark.asyncio
    async def test_no_match_is_idle_with_empty_results(self, controller):
        await controller.search("xyz_no_match")
        assert controller.state.results == []
        assert controller.state.status.kind == "idle"
        assert controller.state.error_message is None

    @pytest.mark.asyncio
    async def test_transport_error_sets_error_and_clears_results(self, controller, source):
        await controller.search("chicken")
        assert controller.state.results

        source.fail_search = True
        await controller.search("pasta")

        assert controller.state.results == []
        assert controller.state.error_message == SEARCH_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_search_clears_selection(self, controller):
        await controller.select_recipe("52772")
        assert controller.state.selected is not None

        await controller.search("pasta")
        assert controller.state.selected is None

    @pytest.mark.asyncio
    async def test_loading_hides_stale_results(self, controller, source):
        await controller.search("chicken")
        release = source.gate("pasta")

        task = asyncio.ensure_future(controller.search("pasta"))
        await asyncio.sleep(0.01)
        assert controller.state.is_loading
        assert controller.state.visible_results == []
        # Previous results are only replaced once the new search completes
        assert len(controller.state.results) == 2

        release.set()
        await wait_for_task(task)
        assert [r.id for r in controller.state.visible_results] == ["52771"]

    @pytest.mark.asyncio
    async def test_error_is_cleared_by_next_search(self, controller, source):
        source.fail_search = True
        await controller.search("chicken")
        assert controller.state.error_message == SEARCH_FAILED_MESSAGE

        source.fail_search = False
        await controller.search("chicken")
        assert controller.state.status.kind == "idle"
        assert len(controller.state.results) == 2


class TestSetQuery:
    """Tests for debounced input."""

    @pytest.mark.asyncio
    async def test_empty_query_searches_default_immediately(self, source):
        controller = QueryController(source, quiet_period=10.0)
        controller.set_query("")
        await asyncio.wait_for(controller.drain(), timeout=5)
        assert source.search_calls == ["chicken"]

    @pytest.mark.asyncio
    async def test_start_runs_default_search(self, controller, source):
        controller.start()
        await asyncio.wait_for(controller.drain(), timeout=5)
        assert source.search_calls == ["chicken"]
        assert len(controller.state.results) == 2

    @pytest.mark.asyncio
    async def test_rapid_edits_produce_single_search(self, controller, source):
        controller.set_query("a")
        controller.set_query("ab")
        assert controller.state.query == "ab"
        assert source.search_calls == []

        await asyncio.sleep(QUIET * 4)
        await asyncio.wait_for(controller.drain(), timeout=5)

        assert source.search_calls == ["ab"]
        assert [r.name for r in controller.state.results] == ["Abgoosht"]

    @pytest.mark.asyncio
    async def test_no_search_before_quiet_period(self, source):
        controller = QueryController(source, quiet_period=0.2)
        controller.set_query("pasta")
        await asyncio.sleep(0.05)
        assert source.search_calls == []

        await asyncio.sleep(0.3)
        await asyncio.wait_for(controller.drain(), timeout=5)
        assert source.search_calls == ["pasta"]

    @pytest.mark.asyncio
    async def test_edit_supersedes_in_flight_search(self, controller, source):
        release = source.gate("chicken")
        controller.start()
        await asyncio.sleep(0.01)

        controller.set_query("pasta")
        await asyncio.sleep(QUIET * 4)
        release.set()
        await asyncio.wait_for(controller.drain(), timeout=5)

        assert source.search_calls == ["chicken", "pasta"]
        assert [r.id for r in controller.state.results] == ["52771"]

    @pytest.mark.asyncio
    async def test_cancel_pending_stops_timer(self, controller, source):
        controller.set_query("pasta")
        controller.cancel_pending()
        await asyncio.sleep(QUIET * 4)
        assert source.search_calls == []

    @pytest.mark.asyncio
    async def test_submit_query_skips_quiet_period(self, source):
        controller = QueryController(source, quiet_period=10.0)
        await controller.submit_query("pasta")
        assert controller.state.query == "pasta"
        assert source.search_calls == ["pasta"]

    def test_set_query_requires_running_loop(self, controller):
        with pytest.raises(RuntimeError):
            controller.set_query("pasta")


class TestSupersededResults:
    """Tests for generation-token discard of stale responses."""

    @pytest.mark.asyncio
    async def test_older_search_result_discarded(self, controller, source):
        release = source.gate("chicken")
        slow = asyncio.ensure_future(controller.search("chicken"))
        await asyncio.sleep(0.01)

        await controller.search("pasta")
        release.set()
        await wait_for_task(slow)

        assert [r.id for r in controller.state.results] == ["52771"]
        assert controller.state.status.kind == "idle"

    @pytest.mark.asyncio
    async def test_older_search_failure_discarded(self, controller, source):
        release = source.gate("chicken")
        source.fail_search = True
        slow = asyncio.ensure_future(controller.search("chicken"))
        await asyncio.sleep(0.01)

        source.fail_search = False
        await controller.search("pasta")
        source.fail_search = True
        release.set()
        await wait_for_task(slow)

        assert controller.state.error_message is None
        assert [r.id for r in controller.state.results] == ["52771"]

    @pytest.mark.asyncio
    async def test_close_during_lookup_discards_details(self, controller, source):
        await controller.search("chicken")
        release = source.gate("52772")

        task = controller.request_recipe("52772")
        await asyncio.sleep(0.01)
        assert controller.state.is_loading

        controller.close_details()
        release.set()
        await wait_for_task(task)

        assert controller.state.selected is None
        assert controller.state.status.kind == "idle"
        assert source.lookup_calls == ["52772"]

    @pytest.mark.asyncio
    async def test_newer_selection_wins(self, controller, source):
        await controller.search("chicken")
        release = source.gate("52772")
        first = controller.request_recipe("52772")
        await asyncio.sleep(0.01)

        await controller.select_recipe("52795")
        release.set()
        await wait_for_task(first)

        assert controller.state.selected.id == "52795"


class TestSelectRecipe:
    """Tests for detail lookups."""

    @pytest.mark.asyncio
    async def test_select_sets_selected(self, controller):
        await controller.select_recipe("52772")
        selected = controller.state.selected
        assert selected.id == "52772"
        assert selected.ingredients == ["1 kg Chicken"]
        assert controller.state.status.kind == "idle"

    @pytest.mark.asyncio
    async def test_not_found(self, controller):
        await controller.select_recipe("999999")
        assert controller.state.selected is None
        assert controller.state.error_message == DETAILS_NOT_FOUND_MESSAGE

    @pytest.mark.asyncio
    async def test_record_without_id_is_not_found(self, controller, source):
        source.lookup_by_id = lambda recipe_id: {"idMeal": None, "strMeal": "No id"}
        await controller.select_recipe("123")
        assert controller.state.error_message == DETAILS_NOT_FOUND_MESSAGE

    @pytest.mark.asyncio
    async def test_transport_error(self, controller, source):
        await controller.select_recipe("52772")
        source.fail_lookup = True
        await controller.select_recipe("52795")
        assert controller.state.selected is None
        assert controller.state.error_message == DETAILS_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_close_clears_error_and_selection(self, controller):
        await controller.select_recipe("999999")
        controller.close_details()
        assert controller.state.status.kind == "idle"
        assert controller.state.selected is None

    @pytest.mark.asyncio
    async def test_controller_usable_after_error(self, controller, source):
        source.fail_lookup = True
        await controller.select_recipe("52772")
        source.fail_lookup = False
        await controller.select_recipe("52772")
        assert controller.state.selected.id == "52772"
        assert controller.state.error_message is None


class TestListeners:
    """Tests for state change notifications."""

    @pytest.mark.asyncio
    async def test_listener_sees_loading_then_idle(self, controller):
        kinds = []
        controller.subscribe(lambda state: kinds.append(state.status.kind))
        await controller.search("pasta")
        assert kinds == ["loading", "idle"]

    @pytest.mark.asyncio
    async def test_broken_listener_does_not_break_controller(self, controller):
        seen = []

        def broken(state):
            raise ValueError("listener bug")

        controller.subscribe(broken)
        controller.subscribe(lambda state: seen.append(state.status.kind))
        await controller.search("pasta")

        assert seen[-1] == "idle"
        assert len(controller.state.results) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self, controller):
        seen = []

        def listener(state):
            seen.append(state.status.kind)

        controller.subscribe(listener)
        controller.unsubscribe(listener)
        await controller.search("pasta")
        assert seen == []


class TestMalformedRecords:
    """Malformed source payloads end in a settled state, never a stuck spinner."""

    @pytest.mark.asyncio
    async def test_non_object_meal_from_mealdb_is_search_error(self):
        session = Mock()
        session.get.return_value.json.return_value = {"meals": ["oops"]}
        controller = QueryController(MealDBSource(base_url="https://example.test/v1", session=session))

        await controller.search("chicken")

        assert controller.state.status == SearchStatus.error(SEARCH_FAILED_MESSAGE)
        assert controller.state.results == []

    @pytest.mark.asyncio
    async def test_non_object_records_are_skipped(self, controller, source):
        source.meals["mixed"] = ["oops", raw_meal("52772", "Teriyaki Chicken Casserole")]

        await controller.search("mixed")

        assert [r.id for r in controller.state.results] == ["52772"]
        assert controller.state.status.kind == "idle"
