from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.metrics import accuracy_score, roc_auc_score
from statsmodels.tools.sm_exceptions import ConvergenceWarning, PerfectSeparationWarning

from .cleaning import location_labels
from .errors import ModelFitError

log = logging.getLogger(__name__)

INTERCEPT = "const"
FIT_WARNINGS = (PerfectSeparationWarning, ConvergenceWarning)


@dataclass
class LateNightModel:
    result: Any
    reference_level: str
    levels: List[str]
    n_obs: int
    excluded_rows: int
    separated_levels: List[str] = field(default_factory=list)
    fit_warnings: List[str] = field(default_factory=list)


def _design_matrix(locations: pd.Series, levels: List[str]) -> pd.DataFrame:
    dummies = pd.get_dummies(
        locations.astype(pd.CategoricalDtype(levels)),
        drop_first=True,
        dtype=float,
    )
    dummies.insert(0, INTERCEPT, 1.0)
    return dummies


def fit_late_night_model(df: pd.DataFrame, maxiter: int = 100) -> LateNightModel:
    """Fit a binomial GLM (logit link) of ``late_night`` on location category.

    The alphabetically first location level is the reference absorbed into the
    intercept. Levels whose response never varies are reported in
    ``separated_levels``; their coefficients run off towards +/- infinity with
    very large standard errors but the fit still returns.
    """
    data = pd.DataFrame(
        {
            "late_night": df["late_night"],
            "location": location_labels(df["location_category"]),
        }
    )
    unlabelled = data["late_night"].isna()
    excluded = int(unlabelled.sum())
    if excluded:
        log.warning("Excluding %s records with unknown hour from the model", f"{excluded:,}")
    data = data.loc[~unlabelled]
    if data.empty:
        raise ModelFitError("No records with a late-night label are available for model fitting.")

    endog = data["late_night"].astype(int)
    levels = sorted(data["location"].unique().tolist())
    exog = _design_matrix(data["location"], levels)

    with warnings.catch_warnings(record=True) as caught:
        for category in FIT_WARNINGS:
            warnings.simplefilter("always", category)
        result = sm.GLM(endog, exog, family=sm.families.Binomial()).fit(maxiter=maxiter)
    fit_warnings = sorted({str(item.message) for item in caught if issubclass(item.category, FIT_WARNINGS)})
    for item in caught:
        if not issubclass(item.category, FIT_WARNINGS):
            warnings.warn_explicit(item.message, item.category, item.filename, item.lineno)
    for message in fit_warnings:
        log.warning("GLM fit: %s", message)

    level_rates = endog.groupby(data["location"]).mean()
    separated = sorted(level_rates[level_rates.isin([0.0, 1.0])].index.tolist())
    if separated:
        log.warning(
            "%d location levels have a constant late-night outcome (quasi-separation): %s",
            len(separated),
            ", ".join(separated[:5]) + (" ..." if len(separated) > 5 else ""),
        )

    log.info("Fitted late-night model on %s records across %d locations", f"{len(endog):,}", len(levels))
    return LateNightModel(
        result=result,
        reference_level=levels[0],
        levels=levels,
        n_obs=int(len(endog)),
        excluded_rows=excluded,
        separated_levels=separated,
        fit_warnings=fit_warnings,
    )


def coefficient_table(model: LateNightModel) -> pd.DataFrame:
    res = model.result
    ci = res.conf_int()
    table = pd.DataFrame(
        {
            "term": res.params.index,
            "coef": res.params.values,
            "std_err": res.bse.values,
            "z": res.tvalues.values,
            "p_value": res.pvalues.values,
            "ci_low": ci[0].values,
            "ci_high": ci[1].values,
        }
    )
    with np.errstate(over="ignore"):
        table["odds_ratio"] = np.exp(table["coef"])
    return table


def score_locations(model: LateNightModel, df: pd.DataFrame) -> pd.DataFrame:
    """Predicted late-night probability for every location observed in ``df``."""
    counts = location_labels(df["location_category"]).value_counts()
    observed = counts.index.tolist()
    known = [level for level in observed if level in model.levels]
    unscoreable = sorted(set(observed) - set(known))
    if unscoreable:
        log.warning("Skipping %d locations absent from the model: %s", len(unscoreable), ", ".join(unscoreable))

    params = model.result.params
    linear = np.array(
        [params[INTERCEPT] + (params[level] if level != model.reference_level else 0.0) for level in known],
        dtype=float,
    )
    scores = pd.DataFrame(
        {
            "location_category": known,
            "probability": model.result.family.link.inverse(linear),
            "incidents": [int(counts[level]) for level in known],
        }
    )
    return scores.sort_values(
        ["probability", "location_category"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)


def model_diagnostics(model: LateNightModel) -> Dict[str, Any]:
    res = model.result
    y_true = np.asarray(res.model.endog, dtype=int)
    y_prob = np.asarray(res.fittedvalues, dtype=float)
    y_pred = (y_prob >= 0.5).astype(int)
    null_deviance = float(res.null_deviance)
    auc = float(roc_auc_score(y_true, y_prob)) if len(np.unique(y_true)) > 1 else None
    return {
        "n_obs": model.n_obs,
        "excluded_rows": model.excluded_rows,
        "levels": len(model.levels),
        "reference_level": model.reference_level,
        "late_night_rate": float(y_true.mean()),
        "deviance": float(res.deviance),
        "null_deviance": null_deviance,
        "pseudo_r2": 1.0 - float(res.deviance) / null_deviance if null_deviance > 0 else None,
        "aic": float(res.aic),
        "auc": auc,
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "converged": bool(getattr(res, "converged", True)),
    }
