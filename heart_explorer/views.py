"""
Derived views: the data each chart needs, computed from the current state.

Every builder here is a pure function of (dataset, patient, filters) and
returns None for an empty dataset, which the page shows as "nothing loaded".

Only the scatter view depends on the filters. Histograms and the pie chart
always describe the full dataset, so clicking them never changes them.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import pandas as pd

from heart_explorer.config import (
    CHOLESTEROL_ALERT_DELTA, HIGH_AGE, HIGH_CHOLESTEROL, HIGH_RESTING_BP,
    HISTOGRAM_BUCKETS, HISTOGRAM_DOMAINS, MODERATE_CHOLESTEROL,
    MODERATE_RESTING_BP, UNKNOWN_CATEGORY,
)
from heart_explorer.metrics import Bin, bin, find_bin, is_number, mean, signed
from heart_explorer.state import FilterState

# View names, also used as chart names by the renderers and the router
SUMMARY = "summary"
SCATTER = "scatter"
CHOLESTEROL = "cholesterol"
AGE = "age"
PIE = "pie"

ALL_VIEWS = frozenset({SUMMARY, SCATTER, CHOLESTEROL, AGE, PIE})

HISTOGRAM_METRICS = {
    CHOLESTEROL: "Cholesterol",
    AGE: "Age",
}

RISK_LOW = "Low"
RISK_MODERATE = "Moderate"
RISK_HIGH = "High"


# -----------------------------------------------------------------------------
# View types
# -----------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ScatterView:
    records: pd.DataFrame      # dataset rows that pass the filters
    patient: Dict[str, Any]
    filters: FilterState
    total: int                 # size of the unfiltered dataset


@dataclass(frozen=True)
class HistogramView:
    metric: str
    domain: Tuple[float, float]
    bins: Tuple[Bin, ...]
    patient_value: Any
    patient_bin: Optional[int]

    @property
    def max_count(self) -> int:
        return max((b.count for b in self.bins), default=0)


@dataclass(frozen=True)
class PieView:
    counts: Tuple[Tuple[str, int], ...]    # first-seen order

    def as_dict(self) -> Dict[str, int]:
        return dict(self.counts)

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(category for category, _ in self.counts)


@dataclass(frozen=True)
class SummaryView:
    record_count: int
    chol_diff: float
    hr_diff: float
    chol_label: str
    hr_label: str
    chol_alert: bool
    risk: str


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def chest_pain_category(value) -> str:
    """Map a raw ChestPainType cell to its display category."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return UNKNOWN_CATEGORY
    text = str(value).strip()
    return text or UNKNOWN_CATEGORY


def _exceeds(value, threshold) -> bool:
    return is_number(value) and value > threshold


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------

def apply_filters(dataset: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """
    Restrict the dataset to the rows the active filters allow.

    Age range: ``min <= Age < max`` (missing ages never match).
    Chest pain: equality on the display category, so the "Unknown" slice
    selects rows without a type. Both filters are AND-combined.
    """
    mask = pd.Series(True, index=dataset.index)

    if filters.age_range is not None:
        ages = dataset["Age"]
        mask &= (ages >= filters.age_range.min) & (ages < filters.age_range.max)

    if filters.chest_pain is not None:
        mask &= dataset["ChestPainType"].map(chest_pain_category) == filters.chest_pain

    return dataset[mask]


def classify_risk(patient: Mapping[str, Any]) -> str:
    """
    Illustrative risk label from fixed thresholds.

    Rules are applied in order and later ones override earlier ones.
    """
    risk = RISK_LOW
    if (_exceeds(patient.get("Cholesterol"), MODERATE_CHOLESTEROL)
            or _exceeds(patient.get("RestingBP"), MODERATE_RESTING_BP)):
        risk = RISK_MODERATE
    if (_exceeds(patient.get("Cholesterol"), HIGH_CHOLESTEROL)
            or (_exceeds(patient.get("Age"), HIGH_AGE)
                and _exceeds(patient.get("RestingBP"), HIGH_RESTING_BP))):
        risk = RISK_HIGH
    return risk


def comparative_delta(dataset: pd.DataFrame, patient: Mapping[str, Any], metric: str) -> float:
    """Patient value minus the dataset mean for ``metric``."""
    value = patient.get(metric)
    if not is_number(value):
        return 0.0
    return value - mean(dataset[metric].tolist())


def build_summary_view(dataset: pd.DataFrame, patient: Mapping[str, Any]) -> Optional[SummaryView]:
    if dataset.empty:
        return None

    chol_diff = comparative_delta(dataset, patient, "Cholesterol")
    hr_diff = comparative_delta(dataset, patient, "MaxHR")

    return SummaryView(
        record_count=len(dataset),
        chol_diff=chol_diff,
        hr_diff=hr_diff,
        chol_label=signed(chol_diff),
        hr_label=signed(hr_diff),
        chol_alert=chol_diff > CHOLESTEROL_ALERT_DELTA,
        risk=classify_risk(patient),
    )


def build_scatter_view(dataset: pd.DataFrame, patient: Mapping[str, Any],
                       filters: FilterState) -> Optional[ScatterView]:
    if dataset.empty:
        return None
    return ScatterView(
        records=apply_filters(dataset, filters),
        patient=dict(patient),
        filters=filters,
        total=len(dataset),
    )


def build_histogram_view(dataset: pd.DataFrame, patient: Mapping[str, Any],
                         metric: str) -> Optional[HistogramView]:
    """
    Bin the full dataset for one metric over its fixed domain.

    Args:
        dataset: Current dataset
        patient: Current hypothetical patient
        metric: Column name, one of the keys of HISTOGRAM_DOMAINS

    Returns:
        HistogramView or None when the dataset is empty
    """
    if dataset.empty:
        return None

    domain_min, domain_max = HISTOGRAM_DOMAINS[metric]
    bins = tuple(bin(dataset[metric].tolist(), domain_min, domain_max, HISTOGRAM_BUCKETS))
    patient_value = patient.get(metric)

    return HistogramView(
        metric=metric,
        domain=(domain_min, domain_max),
        bins=bins,
        patient_value=patient_value,
        patient_bin=find_bin(bins, patient_value),
    )


def build_pie_view(dataset: pd.DataFrame) -> Optional[PieView]:
    """Count records per chest-pain category, keeping first-seen order."""
    if dataset.empty:
        return None

    categories = dataset["ChestPainType"].map(chest_pain_category)
    counts = categories.groupby(categories, sort=False).size()

    return PieView(counts=tuple((str(k), int(v)) for k, v in counts.items()))


def build_view(name: str, dataset: pd.DataFrame, patient: Mapping[str, Any],
               filters: FilterState):
    """Build one named view from the current state."""
    if name == SUMMARY:
        return build_summary_view(dataset, patient)
    if name == SCATTER:
        return build_scatter_view(dataset, patient, filters)
    if name in HISTOGRAM_METRICS:
        return build_histogram_view(dataset, patient, HISTOGRAM_METRICS[name])
    if name == PIE:
        return build_pie_view(dataset)
    raise KeyError(f"Unknown view '{name}'")
