"""
Interaction router: UI events in, store mutations and view refreshes out.

Every entry point returns the set of views it invalidated (and refreshed),
which is empty when the event was rejected.

    field input / upload / commit  -> all views
    age-bin or pie-slice click     -> scatter only

Hovers never reach the router; the chart highlights them in the browser.
"""

from typing import Callable, Optional, Sequence

from heart_explorer.engine import Dashboard
from heart_explorer.errors import IngestionFailure, InvalidField
from heart_explorer.ingest import read_records
from heart_explorer.log import get_logger
from heart_explorer.state import AgeRange, Records
from heart_explorer.surfaces import CLICK, ChartEvent
from heart_explorer.views import AGE, ALL_VIEWS, PIE, SCATTER

logger = get_logger(__name__)

NONE = frozenset()

Notify = Callable[[str, str], None]


class InteractionRouter:
    """
    Translates raw UI events into State Store calls.

    Args:
        dashboard: Dashboard whose store is mutated and whose views are refreshed
        notify: Optional ``notify(level, message)`` used for user-facing
            messages; level is one of 'success', 'info', 'warning', 'error'
    """

    def __init__(self, dashboard: Dashboard, notify: Optional[Notify] = None):
        self.dashboard = dashboard
        self.notify = notify or (lambda level, message: None)

    @property
    def store(self):
        return self.dashboard.store

    def _refresh(self, names) -> frozenset:
        return self.dashboard.refresh(names)

    # ---- form --------------------------------------------------------------

    def on_field_input(self, field_name: str, raw) -> frozenset:
        try:
            self.store.set_patient_field(field_name, raw)
        except InvalidField as e:
            logger.warning(f"Rejected input: {e.to_dict()}")
            self.notify("warning", e.message)
            return NONE
        return self._refresh(ALL_VIEWS)

    def on_commit(self) -> frozenset:
        self.store.commit_patient()
        self.notify("success", "Added!")
        return self._refresh(ALL_VIEWS)

    def on_clear_filters(self) -> frozenset:
        if not self.store.filters.active:
            return NONE
        self.store.clear_filters()
        return self._refresh({SCATTER})

    # ---- data --------------------------------------------------------------

    def on_records(self, records: Records) -> frozenset:
        """Replace the dataset with already-parsed records."""
        self.store.load_dataset(records)
        return self._refresh(ALL_VIEWS)

    def on_upload(self, source, name: str = None) -> frozenset:
        """
        Ingest a CSV and replace the dataset with it.

        A failed ingestion leaves the current dataset and views untouched.
        """
        try:
            records = read_records(source, name=name)
        except IngestionFailure as e:
            logger.warning(f"Ingestion failed: {e.to_dict()}")
            self.notify("error", f"Failed to load data: {e.message}")
            return NONE
        changed = self.on_records(records)
        self.notify("info", f"Loaded {len(self.store)} records")
        return changed

    # ---- charts ------------------------------------------------------------

    def dispatch(self, event: ChartEvent) -> frozenset:
        """Route one chart interaction."""
        if event.kind == CLICK and event.chart == AGE:
            lower, upper = event.value
            self.store.toggle_age_range_filter(AgeRange(lower, upper))
            return self._refresh({SCATTER})

        if event.kind == CLICK and event.chart == PIE:
            self.store.toggle_chest_pain_filter(event.value)
            return self._refresh({SCATTER})

        logger.debug(f"Ignored {event.kind} on {event.chart}")
        return NONE

    def on_selection(self, chart: str, events: Sequence[ChartEvent]) -> frozenset:
        """
        Handle a chart's reported selection.

        The last selected element is treated as the click. An empty selection
        means the active element was deselected, so that chart's filter is
        toggled off.
        """
        if events:
            return self.dispatch(events[-1])

        filters = self.store.filters
        if chart == AGE and filters.age_range is not None:
            self.store.toggle_age_range_filter(filters.age_range)
            return self._refresh({SCATTER})
        if chart == PIE and filters.chest_pain is not None:
            self.store.toggle_chest_pain_filter(filters.chest_pain)
            return self._refresh({SCATTER})
        return NONE
