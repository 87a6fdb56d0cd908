from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict

from .aggregates import aggregate_locations, aggregate_weekday_hour, compute_insights, rank_top
from .cleaning import clean_dataframe, compute_quality_metrics, describe_frame
from .config import DATA_URL, FIGURES_DIR, PARSE_POLICIES, REPORT_PATH, TOP_N, ReportConfig
from .errors import ShootingReportError
from .features import augment_temporal_features, flag_late_night
from .figures import (
    configure_matplotlib,
    plot_location_probabilities,
    plot_top_locations,
    plot_weekday_hour,
)
from .ingest import load_raw_data
from .modeling import coefficient_table, fit_late_night_model, model_diagnostics, score_locations
from .report import build_summary_markdown

log = logging.getLogger(__name__)


def run_pipeline(config: ReportConfig) -> Dict[str, Path]:
    raw_df = load_raw_data(config.source, limit=config.limit, timeout=config.timeout)
    clean_df = clean_dataframe(raw_df, parse_policy=config.parse_policy)
    metrics = compute_quality_metrics(raw_df, clean_df)

    featured_df = augment_temporal_features(clean_df)
    weekday_hour = aggregate_weekday_hour(featured_df)
    location_counts = aggregate_locations(featured_df)
    top_locations = rank_top(location_counts, "incidents", n=config.top_n)

    labelled_df = flag_late_night(featured_df)
    model = fit_late_night_model(labelled_df)
    coefficients = coefficient_table(model)
    diagnostics = model_diagnostics(model)
    scores = score_locations(model, labelled_df)
    top_probabilities = rank_top(scores, "probability", n=config.top_n)

    configure_matplotlib()
    figures = {
        "weekday_hour": plot_weekday_hour(weekday_hour, config.figures_dir),
        "top_locations": plot_top_locations(top_locations, config.figures_dir),
        "late_night_probability": plot_location_probabilities(top_probabilities, config.figures_dir),
    }
    for name, path in figures.items():
        log.info("Figure %s written to %s", name, path)

    summary = build_summary_markdown(
        metrics=metrics,
        insights=compute_insights(labelled_df),
        description=describe_frame(clean_df),
        top_locations=top_locations,
        coefficients=coefficients,
        diagnostics=diagnostics,
        top_probabilities=top_probabilities,
        separated_levels=model.separated_levels,
        fit_warnings=model.fit_warnings,
        figures=figures,
        report_path=config.report_path,
    )
    config.report_path.parent.mkdir(parents=True, exist_ok=True)
    config.report_path.write_text(summary, encoding="utf-8")
    log.info("Report written to %s", config.report_path)
    return {"report": config.report_path, **figures}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Render the NYPD shooting incident late-night report.")
    parser.add_argument("--source", default=DATA_URL, help="Dataset URL or local CSV path.")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional row limit for debugging.",
    )
    parser.add_argument("--report", type=Path, default=REPORT_PATH, help="Destination Markdown file.")
    parser.add_argument("--figures-dir", type=Path, default=FIGURES_DIR, help="Directory for PNG figures.")
    parser.add_argument("--top-n", type=int, default=TOP_N, help="Number of locations shown in rankings.")
    parser.add_argument(
        "--parse-errors",
        choices=PARSE_POLICIES,
        default="coerce",
        help="How unparseable dates/times are handled: null silently, null with a warning, or abort.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = ReportConfig(
            source=args.source,
            report_path=args.report,
            figures_dir=args.figures_dir,
            limit=args.limit,
            top_n=args.top_n,
            parse_policy=args.parse_errors,
        )
    except ValueError as exc:
        parser.error(str(exc))
    try:
        outputs = run_pipeline(config)
    except ShootingReportError as exc:
        log.error("Report run aborted: %s", exc)
        sys.exit(1)
    print("Done. Report:", str(outputs["report"]))


if __name__ == "__main__":
    main()
