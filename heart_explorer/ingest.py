"""
CSV ingestion.

Reads a heart-disease CSV (path or uploaded file) into a frame with the fixed
attribute columns. Extra columns are ignored, malformed and empty rows are
skipped, and numbers that do not parse become NaN.
"""

import os

import numpy as np
import pandas as pd

from heart_explorer.config import CATEGORICAL_FIELDS, FIELDS
from heart_explorer.errors import IngestionFailure
from heart_explorer.log import get_logger
from heart_explorer.state import to_frame

logger = get_logger(__name__)


def _clean_text(value):
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return np.nan
    text = str(value).strip()
    return text if text else np.nan


def _source_label(source, name=None) -> str:
    if name:
        return name
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return getattr(source, "name", "uploaded file")


def read_records(source, name: str = None) -> pd.DataFrame:
    """
    Parse a CSV source into dataset records.

    Args:
        source: File path or file-like object (e.g. a Streamlit UploadedFile)
        name: Label used in messages, defaults to the path or file name

    Returns:
        DataFrame: One row per record, columns exactly FIELDS

    Raises:
        IngestionFailure: Source missing, unreadable, or with none of the
            expected columns
    """
    label = _source_label(source, name)

    # Uploaded files may already have been read once
    if hasattr(source, "seek"):
        source.seek(0)

    try:
        raw = pd.read_csv(source, skip_blank_lines=True, on_bad_lines="skip", skipinitialspace=True)
    except FileNotFoundError as e:
        raise IngestionFailure(f"File not found: {label}", source=label) from e
    except pd.errors.EmptyDataError as e:
        raise IngestionFailure(f"{label} is empty", source=label) from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError, ValueError) as e:
        raise IngestionFailure(f"Could not parse {label}: {e}", source=label) from e

    raw.columns = [str(c).strip() for c in raw.columns]
    present = [c for c in FIELDS if c in raw.columns]
    if not present:
        raise IngestionFailure(
            f"{label} has none of the expected columns",
            source=label,
            details={"columns": list(raw.columns), "expected": list(FIELDS)},
        )
    missing = [c for c in FIELDS if c not in raw.columns]
    if missing:
        logger.warning(f"{label}: missing columns {missing}, treated as empty")

    df = to_frame(raw)
    for col in CATEGORICAL_FIELDS:
        df[col] = df[col].map(_clean_text)
    df = df.dropna(how="all").reset_index(drop=True)

    logger.info(f"Read {len(df)} records from {label}")
    return df
