"""
Application state: the dataset, the hypothetical patient and the active filters.

The store is the only writer. Renderers and view builders read it; every
change goes through one of the named entry points below, each of which either
applies completely or raises before touching anything.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import pandas as pd

from heart_explorer.config import (
    DEFAULT_PATIENT, ENUM_VALUES, FIELDS, NUMERIC_FIELDS, OUTCOME_FIELD,
)
from heart_explorer.errors import InvalidField
from heart_explorer.log import get_logger
from heart_explorer.metrics import is_number

logger = get_logger(__name__)

Records = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


# -----------------------------------------------------------------------------
# Value types
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AgeRange:
    """Half-open age interval ``[min, max)``."""
    min: float
    max: float

    def contains(self, age) -> bool:
        return is_number(age) and self.min <= age < self.max


@dataclass(frozen=True)
class FilterState:
    """Optional age-range and chest-pain filters; None means no restriction."""
    age_range: Optional[AgeRange] = None
    chest_pain: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.age_range is not None or self.chest_pain is not None


@dataclass
class HypotheticalPatient:
    """The single user-edited comparison subject, keyed by CSV column name."""
    values: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_PATIENT))

    def snapshot(self) -> Dict[str, Any]:
        """Value copy of the current fields; later edits do not affect it."""
        return {name: self.values.get(name) for name in FIELDS}


# -----------------------------------------------------------------------------
# Coercion
# -----------------------------------------------------------------------------

def _to_number(field_name: str, value):
    if is_number(value):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            raise InvalidField(
                f"'{value}' is not a number", field=field_name, details={"value": value}
            ) from None
        if not is_number(number):
            raise InvalidField(
                f"'{value}' is not a finite number", field=field_name, details={"value": value}
            )
    return int(number) if number.is_integer() else number


def coerce_field(field_name: str, value):
    """
    Validate an attribute name and convert a raw form value for it.

    Args:
        field_name: One of the fixed attribute names
        value: Raw value from the form (number or string)

    Returns:
        The typed value (int/float, 0/1 for the outcome, or a string)

    Raises:
        InvalidField: Unknown attribute or a value that cannot be converted
    """
    if field_name not in FIELDS:
        raise InvalidField(f"Unknown field '{field_name}'", field=field_name)

    if field_name in NUMERIC_FIELDS:
        return _to_number(field_name, value)

    if field_name == OUTCOME_FIELD:
        number = _to_number(field_name, value)
        if number not in (0, 1):
            raise InvalidField(
                f"{field_name} must be 0 or 1, got '{value}'", field=field_name, details={"value": value}
            )
        return int(number)

    text = "" if value is None else str(value).strip()
    allowed = ENUM_VALUES.get(field_name)
    if allowed:
        text = text.upper()
    if not text or (allowed and text not in allowed):
        raise InvalidField(
            f"'{value}' is not a valid {field_name}", field=field_name, details={"value": value}
        )
    return text


def to_frame(records: Records) -> pd.DataFrame:
    """
    Build a dataset frame with exactly the fixed columns.

    Missing columns become NaN; numeric columns that fail to parse become NaN
    rather than 0.
    """
    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        df = pd.DataFrame.from_records(list(records))

    df = df.reindex(columns=list(FIELDS))
    for col in NUMERIC_FIELDS + (OUTCOME_FIELD,):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.reset_index(drop=True)


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------

class StateStore:
    """Owns the dataset, the hypothetical patient and the filter state."""

    def __init__(self, records: Optional[Records] = None):
        self._dataset = to_frame(records if records is not None else [])
        self._patient = HypotheticalPatient()
        self._filters = FilterState()

    @property
    def dataset(self) -> pd.DataFrame:
        """Current dataset. Callers must treat it as read-only."""
        return self._dataset

    @property
    def patient(self) -> Dict[str, Any]:
        return self._patient.snapshot()

    @property
    def filters(self) -> FilterState:
        return self._filters

    def __len__(self) -> int:
        return len(self._dataset)

    # ---- patient -----------------------------------------------------------

    def set_patient_field(self, field_name: str, value) -> None:
        typed = coerce_field(field_name, value)
        self._patient.values[field_name] = typed
        logger.debug(f"patient.{field_name} = {typed!r}")

    def commit_patient(self) -> Dict[str, Any]:
        """Append a snapshot of the patient to the dataset and return it."""
        snapshot = self._patient.snapshot()
        row = to_frame([snapshot])
        if self._dataset.empty:
            self._dataset = row
        else:
            self._dataset = pd.concat([self._dataset, row], ignore_index=True)
        logger.debug(f"Committed patient, dataset now has {len(self._dataset)} records")
        return snapshot

    # ---- dataset -----------------------------------------------------------

    def load_dataset(self, records: Records) -> None:
        self._dataset = to_frame(records)
        logger.debug(f"Loaded dataset with {len(self._dataset)} records")

    # ---- filters -----------------------------------------------------------

    def toggle_age_range_filter(self, age_range: AgeRange) -> FilterState:
        current = self._filters.age_range
        if current is not None and current.min == age_range.min:
            self._filters = replace(self._filters, age_range=None)
        else:
            self._filters = replace(self._filters, age_range=age_range)
        logger.debug(f"Age filter -> {self._filters.age_range}")
        return self._filters

    def toggle_chest_pain_filter(self, pain_type: str) -> FilterState:
        if self._filters.chest_pain == pain_type:
            self._filters = replace(self._filters, chest_pain=None)
        else:
            self._filters = replace(self._filters, chest_pain=pain_type)
        logger.debug(f"Chest pain filter -> {self._filters.chest_pain}")
        return self._filters

    def clear_filters(self) -> FilterState:
        self._filters = FilterState()
        return self._filters
