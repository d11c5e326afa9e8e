"""
Query controller: debounced search, detail lookup and state ownership.

The controller sits between user input and the two remote read operations of a recipe
source. It owns a single SearchState and is the only writer of it.

Flow:
    set_query(text) -> quiet-period timer -> search(term) -> source.search_by_name
        -> normalize_many -> state.results
    select_recipe(id) -> source.lookup_by_id -> normalize -> state.selected

Ordering: every request takes a generation number when it starts. When the request
resumes, its result is applied only if no newer request (or query edit, or close) has
bumped the generation since. Transport calls are never cancelled, only ignored.

Source calls are blocking (requests) and run in a worker thread via asyncio.to_thread,
so all state mutation still happens on the event loop thread, one callback at a time.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Set

from recipe_finder.models import SearchState, SearchStatus
from recipe_finder.normalizer import DEFAULT_PLACEHOLDER, InvalidRecordError, normalize, normalize_many
from recipe_finder.sources.base import BaseRecipeSource, TransportError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_TERM = "chicken"
DEFAULT_QUIET_PERIOD_SECONDS = 0.5

SEARCH_FAILED_MESSAGE = "Failed to load recipes. Please try again later."
DETAILS_FAILED_MESSAGE = "Failed to load recipe details. Please try again later."
DETAILS_NOT_FOUND_MESSAGE = "Recipe details not found."

StateListener = Callable[[SearchState], Any]


class QueryController:
    """
    Owns the search state and mediates between user input and a recipe source.

    Args:
        source: Recipe source used for search and lookup
        default_term: Term searched when the query is empty
        quiet_period: Debounce delay in seconds after the last set_query call
        placeholder: Quick-facts placeholder text passed to the normalizer
    """

    def __init__(
        self,
        source: BaseRecipeSource,
        default_term: str = DEFAULT_SEARCH_TERM,
        quiet_period: float = DEFAULT_QUIET_PERIOD_SECONDS,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ) -> None:
        self.source = source
        self.default_term = default_term
        self.quiet_period = quiet_period
        self.placeholder = placeholder
        self.state = SearchState()

        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> None:
        """Register a callable invoked with the state after every mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as e:
                # A broken listener must not break the controller for the others
                logger.error("State listener %r failed: %s", listener, e, exc_info=True)

    # ------------------------------------------------------------------
    # Generation bookkeeping
    # ------------------------------------------------------------------

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initial load: search for the default term right away."""
        self.set_query("")

    def set_query(self, text: str) -> None:
        """
        Update the raw query and schedule a search.

        An empty query searches the default term immediately. Any other text arms the
        quiet-period timer, replacing a previously armed one, so only the last input
        in an idle window produces a request. In-flight requests are superseded.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._next_generation()
        self.state.query = text
        self._notify()

        if text == "":
            self._spawn(self.search(self.default_term))
            return

        self._timer = loop.call_later(self.quiet_period, self._on_quiet_period, text)

    async def submit_query(self, text: str) -> None:
        """
        Update the query and search right away, bypassing the quiet period.

        For inputs that already commit deliberately (Enter key, form submit).
        """
        self._cancel_timer()
        self.state.query = text
        await self.search(text)

    def _on_quiet_period(self, text: str) -> None:
        self._timer = None
        logger.debug("Quiet period elapsed, searching %r", text)
        self._spawn(self.search(text))

    async def search(self, term: str) -> None:
        """
        Run a list search and apply its outcome if still current.

        An empty term searches the default term. An empty result list is a valid,
        non-error outcome.
        """
        term = term or self.default_term
        generation = self._next_generation()
        self.state.status = SearchStatus.loading()
        self.state.selected = None
        self._notify()

        try:
            raws = await asyncio.to_thread(self.source.search_by_name, term)
        except TransportError as e:
            if not self._is_current(generation):
                logger.debug("Discarding failed search %r from superseded generation %d", term, generation)
                return
            logger.error("Failed to fetch recipes for %r: %s", term, e)
            self.state.results = []
            self.state.status = SearchStatus.error(SEARCH_FAILED_MESSAGE)
            self._notify()
            return

        if not self._is_current(generation):
            logger.debug("Discarding search %r from superseded generation %d", term, generation)
            return

        self.state.results = normalize_many(raws, placeholder=self.placeholder)
        self.state.status = SearchStatus.idle()
        logger.info("Search %r: %d recipes", term, len(self.state.results))
        self._notify()

    async def select_recipe(self, recipe_id: str) -> None:
        """Fetch full details for one recipe and show them if still current."""
        generation = self._next_generation()
        self.state.status = SearchStatus.loading()
        self._notify()

        try:
            raw = await asyncio.to_thread(self.source.lookup_by_id, recipe_id)
        except TransportError as e:
            if not self._is_current(generation):
                return
            logger.error("Failed to fetch recipe details for %r: %s", recipe_id, e)
            self.state.selected = None
            self.state.status = SearchStatus.error(DETAILS_FAILED_MESSAGE)
            self._notify()
            return

        if not self._is_current(generation):
            logger.debug("Discarding details for %r from superseded generation %d", recipe_id, generation)
            return

        recipe = None
        if raw is not None:
            try:
                recipe = normalize(raw, placeholder=self.placeholder)
            except InvalidRecordError as e:
                logger.warning("Lookup for %r returned an unusable record: %s", recipe_id, e)

        if recipe is None:
            self.state.selected = None
            self.state.status = SearchStatus.error(DETAILS_NOT_FOUND_MESSAGE)
        else:
            self.state.selected = recipe
            self.state.status = SearchStatus.idle()
        self._notify()

    def request_recipe(self, recipe_id: str) -> asyncio.Task:
        """Start select_recipe in the background (for event handlers that cannot await)."""
        return self._spawn(self.select_recipe(recipe_id))

    def close_details(self) -> None:
        """Leave the detail view: clear selection and error, supersede in-flight requests."""
        self._next_generation()
        self.state.selected = None
        self.state.status = SearchStatus.idle()
        self._notify()

    def cancel_pending(self) -> None:
        """Cancel the quiet-period timer and supersede in-flight requests (teardown)."""
        self._cancel_timer()
        self._next_generation()

    async def drain(self) -> None:
        """Wait for all spawned request tasks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
