"""
Dashboard: the state store plus the derived views computed from it.

Views are rebuilt only when a mutation invalidates them; each router entry
point names the views it affects, so nothing is recomputed needlessly and no
view is read after its inputs changed.
"""

from typing import Iterable, Optional

from heart_explorer.log import get_logger
from heart_explorer.state import StateStore
from heart_explorer.views import AGE, ALL_VIEWS, CHOLESTEROL, PIE, SCATTER, SUMMARY, build_view

logger = get_logger(__name__)


class Dashboard:
    """Holds the store and the current derived views."""

    def __init__(self, store: Optional[StateStore] = None):
        self.store = store if store is not None else StateStore()
        self._views = {}
        self.refresh(ALL_VIEWS)

    def refresh(self, names: Iterable[str] = ALL_VIEWS) -> frozenset:
        """Rebuild the named views from the current state."""
        names = frozenset(names)
        dataset = self.store.dataset
        patient = self.store.patient
        filters = self.store.filters
        for name in names:
            self._views[name] = build_view(name, dataset, patient, filters)
        if names:
            logger.debug(f"Recomputed views: {', '.join(sorted(names))}")
        return names

    def view(self, name: str):
        return self._views[name]

    @property
    def summary(self):
        return self._views[SUMMARY]

    @property
    def scatter(self):
        return self._views[SCATTER]

    @property
    def cholesterol(self):
        return self._views[CHOLESTEROL]

    @property
    def age(self):
        return self._views[AGE]

    @property
    def pie(self):
        return self._views[PIE]

    @property
    def is_empty(self) -> bool:
        return len(self.store) == 0
