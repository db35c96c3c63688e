"""
Heart-Explorer configuration.

Module-level constants for the dashboard plus the lookup that decides which
CSV file is loaded on start-up.
"""

import os
from pathlib import Path
from typing import Optional

import streamlit as st

from heart_explorer.log import get_logger

logger = get_logger(__name__)

PAGE_TITLE = "Heart-Explorer"
PAGE_ICON = "🫀"

# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------

NUMERIC_FIELDS = ("Age", "RestingBP", "Cholesterol", "MaxHR")
CATEGORICAL_FIELDS = ("Sex", "ChestPainType", "ExerciseAngina")
OUTCOME_FIELD = "HeartDisease"

FIELDS = (
    "Age", "Sex", "ChestPainType", "RestingBP",
    "Cholesterol", "MaxHR", "ExerciseAngina", "HeartDisease",
)

ENUM_VALUES = {
    "Sex": ("M", "F"),
    "ExerciseAngina": ("Y", "N"),
}

# Suggested options for the form; the data may contain others
CHEST_PAIN_TYPES = ("ATA", "NAP", "ASY", "TA")

UNKNOWN_CATEGORY = "Unknown"

DEFAULT_PATIENT = {
    "Age": 45,
    "Sex": "M",
    "ChestPainType": "ATA",
    "RestingBP": 130,
    "Cholesterol": 220,
    "MaxHR": 150,
    "ExerciseAngina": "N",
    "HeartDisease": 0,
}

# -----------------------------------------------------------------------------
# Chart layout
# -----------------------------------------------------------------------------

HISTOGRAM_BUCKETS = 15
HISTOGRAM_DOMAINS = {
    "Age": (20, 80),
    "Cholesterol": (0, 630),
}

SCATTER_X_DOMAIN = (20, 80)     # Age
SCATTER_Y_DOMAIN = (60, 220)    # MaxHR

SCATTER_HEIGHT = 450
HISTOGRAM_HEIGHT = 200
PIE_HEIGHT = 260

# Thresholds for the illustrative risk label
MODERATE_CHOLESTEROL = 240
MODERATE_RESTING_BP = 140
HIGH_CHOLESTEROL = 280
HIGH_AGE = 60
HIGH_RESTING_BP = 150

# Cholesterol above the population mean by more than this is flagged
CHOLESTEROL_ALERT_DELTA = 50

# -----------------------------------------------------------------------------
# Colors
# -----------------------------------------------------------------------------

PATIENT_COLOR = "#f43f5e"
DISEASE_COLOR = "rgba(239, 68, 68, 0.4)"
HEALTHY_COLOR = "rgba(16, 185, 129, 0.4)"
BIN_COLOR = "rgba(148, 163, 184, 0.3)"
LABEL_COLOR = "#ffffff"
SLICE_STROKE = "#1e293b"
PIE_PALETTE = ("#f43f5e", "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6")
DIMMED_OPACITY = 0.3
# Pixels added to the outer radius of the pie slice under the pointer
HOVER_GROWTH = 5

RISK_COLORS = {
    "Low": "#10b981",
    "Moderate": "#f59e0b",
    "High": "#ef4444",
}

# -----------------------------------------------------------------------------
# Runtime settings
# -----------------------------------------------------------------------------

BACKENDS = ("altair", "plotly")
CHART_BACKEND = os.getenv("HEART_EXPLORER_BACKEND", "altair").lower()
LOG_LEVEL = os.getenv("HEART_EXPLORER_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("HEART_EXPLORER_LOG_FILE") or None

DEFAULT_CSV = "data/heart.csv"


def resolve_data_path(relative_path: str = DEFAULT_CSV) -> Optional[str]:
    """
    Find the CSV file to load when the dashboard starts.

    Priority: Streamlit secrets ([data] csv) -> HEART_EXPLORER_CSV env var ->
    the relative path from the working directory -> the project root.

    Returns:
        str or None: Path of an existing file, None if nothing was found
    """
    try:
        from_secret = (st.secrets.get("data", {}) or {}).get("csv")
    except Exception as e:  # no secrets.toml
        logger.debug(f"No Streamlit secrets available: {e}")
        from_secret = None
    if from_secret:
        return from_secret

    from_env = os.getenv("HEART_EXPLORER_CSV")
    if from_env:
        return from_env

    if os.path.exists(relative_path):
        return relative_path
    project_root = Path(__file__).parent.parent
    abs_path = project_root / relative_path
    if abs_path.exists():
        return str(abs_path)
    return None
