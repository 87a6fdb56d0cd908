from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping

import pandas as pd

from .config import LATE_NIGHT_END, LATE_NIGHT_START


def format_toplist(counter: Mapping[str, int]) -> str:
    items = [f"{k} ({v:,})" for k, v in counter.items()]
    return ", ".join(items)


def describe_missing(missing_fraction: Dict[str, float]) -> str:
    ordered = sorted(missing_fraction.items(), key=lambda kv: kv[1], reverse=True)
    bullets = [
        f"- `{col}` missing {share:.1%}"
        for col, share in ordered
        if share > 0
    ]
    if not bullets:
        return "- No missing data detected."
    return "\n".join(bullets)


def format_table(df: pd.DataFrame, formats: Dict[str, str] | None = None) -> pd.DataFrame:
    """String-formatted copy of ``df``; missing values read ``n/a``."""
    formats = formats or {}
    formatted = df.astype(object)
    for col in formatted.columns:
        fmt = formats.get(col)
        if fmt:
            formatted[col] = formatted[col].map(lambda value: format(value, fmt), na_action="ignore")
        else:
            formatted[col] = formatted[col].map(lambda value: str(value).replace("|", "\\|"), na_action="ignore")
    return formatted.fillna("n/a")


def markdown_table(df: pd.DataFrame, formats: Dict[str, str] | None = None) -> str:
    # values are pre-formatted; keep tabulate from re-parsing them as numbers
    return format_table(df, formats).to_markdown(index=False, disable_numparse=True)


def _figure_link(title: str, path: Path, report_path: Path) -> str:
    relative = Path(os.path.relpath(path, report_path.parent)).as_posix()
    return f"![{title}]({relative})"


def _format_optional(value, fmt: str) -> str:
    return "n/a" if value is None else format(value, fmt)


def describe_highlights(insights: Dict[str, object]) -> List[str]:
    lines: List[str] = []
    hourly_peak = insights.get("hourly_peak")
    weekday_peak = insights.get("weekday_peak")
    if hourly_peak:
        lines.append(
            f"- Peak hour: {hourly_peak['hour']:02d}:00 with {hourly_peak['incidents']:,} incidents; "
            f"quietest hour is {hourly_peak['min_hour']:02d}:00 ({hourly_peak['min_incidents']:,} incidents)."
        )
    if weekday_peak:
        lines.append(
            f"- {weekday_peak['name']} carries {weekday_peak['share']:.1%} of dated incidents, "
            f"against {weekday_peak['min_share']:.1%} on {weekday_peak['min_name']}."
        )
    share = insights.get("late_night_share")
    if share is not None:
        lines.append(
            f"- {insights['late_night_incidents']:,} incidents ({share:.1%}) happened late at night "
            f"({LATE_NIGHT_START:02d}:00 to {LATE_NIGHT_END:02d}:00)."
        )
    return lines


def describe_separation(separated_levels: List[str], fit_warnings: List[str]) -> List[str]:
    if not separated_levels and not fit_warnings:
        return ["- No quasi-separation detected."]
    lines = [
        f"- `{level}` has a constant late-night outcome; its coefficient and standard error are unstable."
        for level in separated_levels
    ]
    lines.extend(f"- Fitting routine warned: {message}" for message in fit_warnings)
    return lines


def build_summary_markdown(
    metrics: Dict[str, object],
    insights: Dict[str, object],
    description: pd.DataFrame,
    top_locations: pd.DataFrame,
    coefficients: pd.DataFrame,
    diagnostics: Dict[str, object],
    top_probabilities: pd.DataFrame,
    separated_levels: List[str],
    fit_warnings: List[str],
    figures: Dict[str, Path],
    report_path: Path,
) -> str:
    coefficient_view = coefficients[["term", "coef", "std_err", "p_value", "odds_ratio"]]
    top_counts = dict(zip(top_locations["location_category"].head(3), top_locations["incidents"].head(3)))
    md_lines = [
        "# NYPD Shooting Incidents: When and Where Late-Night Shootings Happen",
        "",
        "## Dataset Snapshot",
        f"- **Records analysed:** {metrics['records']:,}",
        f"- **Temporal coverage:** {metrics['date_min'] or 'n/a'} to {metrics['date_max'] or 'n/a'}",
        f"- **Distinct location categories:** {metrics['distinct_locations']:,} (missing counted as one)",
        f"- **Unparseable dates / times:** {metrics['date_parse_failures']:,} / {metrics['time_parse_failures']:,}"
        " (kept as missing values)",
        f"- **Most frequent locations:** {format_toplist(top_counts)}",
        "",
        "## Data Quality Watchlist",
        describe_missing(metrics["missing_fraction"]),
        "",
        "```",
        description.to_string(),
        "```",
        "",
        "## When Do Shootings Happen?",
        *describe_highlights(insights),
        "",
        _figure_link("Incidents by hour and weekday", figures["weekday_hour"], report_path),
        "",
        "## Where Do Shootings Happen?",
        "Missing location descriptions are kept as their own category.",
        "",
        _figure_link("Top locations by incidents", figures["top_locations"], report_path),
        "",
        markdown_table(top_locations, {"incidents": ","}),
        "",
        "## Modelling Late-Night Incidents by Location",
        f"Binomial regression (logit link) of the late-night indicator on location category. "
        f"The reference level `{diagnostics['reference_level']}` is absorbed into the intercept; "
        "each coefficient is the change in log-odds relative to it.",
        "",
        markdown_table(
            coefficient_view,
            {"coef": ".4f", "std_err": ".4f", "p_value": ".4g", "odds_ratio": ".3f"},
        ),
        "",
        "### Model Diagnostics",
        f"- Observations: {diagnostics['n_obs']:,} ({diagnostics['excluded_rows']:,} excluded for unknown hour)",
        f"- Late-night base rate: {diagnostics['late_night_rate']:.1%}",
        f"- Deviance: {diagnostics['deviance']:,.1f} (null {diagnostics['null_deviance']:,.1f}); "
        f"pseudo R²: {_format_optional(diagnostics['pseudo_r2'], '.4f')}",
        f"- AIC: {diagnostics['aic']:,.1f}",
        f"- In-sample ROC AUC: {_format_optional(diagnostics['auc'], '.3f')}; "
        f"accuracy at 0.5: {diagnostics['accuracy']:.1%}",
        f"- Converged: {'yes' if diagnostics['converged'] else 'no'}",
        "",
        "### Quasi-separation",
        *describe_separation(separated_levels, fit_warnings),
        "",
        "## Locations Most Likely to See a Late-Night Shooting",
        _figure_link("Late-night probability by location", figures["late_night_probability"], report_path),
        "",
        markdown_table(top_probabilities, {"probability": ".1%", "incidents": ","}),
        "",
    ]
    return "\n".join(md_lines)
