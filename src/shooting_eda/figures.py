from __future__ import annotations

from pathlib import Path

import pandas as pd
import seaborn as sns
from matplotlib import pyplot as plt
from matplotlib.ticker import PercentFormatter

from .config import FIGURE_DPI, HOURS, PALETTE, WEEKDAY_ORDER


def configure_matplotlib() -> None:
    sns.set_theme(style="whitegrid", context="talk")
    plt.rcParams.update({"axes.spines.right": False, "axes.spines.top": False})


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=FIGURE_DPI)
    plt.close(fig)
    return path


def weekday_hour_matrix(counts: pd.DataFrame) -> pd.DataFrame:
    """Hour x weekday incident matrix with every hour and weekday present."""
    subset = counts.dropna(subset=["weekday", "hour"])
    subset = subset.assign(
        weekday=subset["weekday"].astype(str),
        hour=subset["hour"].astype(int),
    )
    return (
        subset.pivot_table(index="hour", columns="weekday", values="incidents", aggfunc="sum")
        .reindex(index=HOURS, columns=WEEKDAY_ORDER)
        .fillna(0)
        .astype(int)
    )


def plot_weekday_hour(counts: pd.DataFrame, figures_dir: Path) -> Path:
    matrix = weekday_hour_matrix(counts)
    fig, ax = plt.subplots(figsize=(14, 7))
    matrix.plot.bar(
        stacked=True,
        width=0.85,
        color=sns.color_palette("mako", len(WEEKDAY_ORDER)),
        ax=ax,
    )
    ax.set_title("Shooting Incidents by Hour of Day and Weekday")
    ax.set_xlabel("Hour of Day")
    ax.set_ylabel("Incidents")
    ax.tick_params(axis="x", labelrotation=0)
    ax.legend(title="Weekday", ncol=1, fontsize="small", title_fontsize="small", loc="upper center")
    return _save(fig, figures_dir / "incidents_by_weekday_hour.png")


def plot_top_locations(top: pd.DataFrame, figures_dir: Path) -> Path:
    # barh draws the first row at the bottom; reverse so the largest sits on top
    ordered = top.iloc[::-1]
    fig, ax = plt.subplots(figsize=(11, 7))
    ax.barh(ordered["location_category"], ordered["incidents"], color=PALETTE["navy"])
    ax.set_title(f"Top {len(top)} Locations by Shooting Incidents")
    ax.set_xlabel("Incidents")
    ax.set_ylabel("")
    return _save(fig, figures_dir / "top_locations.png")


def plot_location_probabilities(top: pd.DataFrame, figures_dir: Path) -> Path:
    ordered = top.iloc[::-1]
    fig, ax = plt.subplots(figsize=(11, 7))
    ax.barh(ordered["location_category"], ordered["probability"], color=PALETTE["crimson"])
    ax.set_xlim(0, 1)
    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1))
    ax.set_title(f"Top {len(top)} Locations by Predicted Late-Night Probability")
    ax.set_xlabel("P(incident between 22:00 and 05:00)")
    ax.set_ylabel("")
    return _save(fig, figures_dir / "late_night_probability.png")
