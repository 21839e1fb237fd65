"""CSV report of per-image counts followed by the run summary block."""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

import pandas as pd

from .summary import RESULT_FIELD_ORDER, SUMMARY_FIELD_ORDER, ImageResult, RunSummary


def results_frame(results: Iterable[ImageResult]) -> pd.DataFrame:
    """One row per image, in the order given."""
    rows = [result.as_row() for result in results]
    return pd.DataFrame(rows, columns=list(RESULT_FIELD_ORDER))


def summary_frame(summary: RunSummary) -> pd.DataFrame:
    return pd.DataFrame([summary.as_row()], columns=list(SUMMARY_FIELD_ORDER))


def write_report(
    results: Iterable[ImageResult],
    summary: RunSummary,
    stream: Optional[TextIO] = None,
) -> None:
    out = stream if stream is not None else sys.stdout
    results_frame(results).to_csv(out, index=False, lineterminator="\n")
    summary_frame(summary).to_csv(out, index=False, lineterminator="\n")
    out.flush()
