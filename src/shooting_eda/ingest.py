from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd
import requests

from .config import REQUEST_TIMEOUT, SOURCE_COLUMNS
from .errors import DatasetLoadError

log = logging.getLogger(__name__)


def is_remote(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_csv_text(url: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """Download the CSV payload in a single GET; any network or HTTP error is fatal."""
    log.info("Fetching dataset from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DatasetLoadError(f"Failed to fetch dataset from {url}: {exc}") from exc
    return response.text


def _read_frame(buffer, limit: int | None) -> pd.DataFrame:
    return pd.read_csv(
        buffer,
        usecols=lambda column: column in SOURCE_COLUMNS,
        dtype=str,
        nrows=limit,
    )


def load_raw_data(
    source: str,
    limit: int | None = None,
    timeout: float = REQUEST_TIMEOUT,
) -> pd.DataFrame:
    """Read the incident CSV from a URL or local path.

    Only the date, time and location columns are materialized; every other
    source column is skipped at parse time.
    """
    try:
        if is_remote(source):
            df = _read_frame(io.StringIO(fetch_csv_text(source, timeout=timeout)), limit)
        else:
            path = Path(source).expanduser()
            log.info("Reading dataset from %s", path)
            df = _read_frame(path, limit)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as exc:
        raise DatasetLoadError(f"Could not read dataset from {source}: {exc}") from exc

    missing_cols = [col for col in SOURCE_COLUMNS if col not in df.columns]
    if missing_cols:
        raise DatasetLoadError(f"Missing columns: {', '.join(missing_cols)}")

    log.info("Loaded %s incident rows", f"{len(df):,}")
    return df[SOURCE_COLUMNS]
