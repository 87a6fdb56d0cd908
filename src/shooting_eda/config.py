from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
DATA_URL = "https://data.cityofnewyork.us/api/views/833y-pf2k/rows.csv?accessType=DOWNLOAD"
REPORTS_DIR = BASE_DIR / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"
REPORT_PATH = REPORTS_DIR / "nypd_shooting_report.md"
REQUEST_TIMEOUT = 60.0

DATE_COLUMN = "OCCUR_DATE"
TIME_COLUMN = "OCCUR_TIME"
LOCATION_COLUMN = "LOCATION_DESC"
SOURCE_COLUMNS = [DATE_COLUMN, TIME_COLUMN, LOCATION_COLUMN]
DATE_FORMAT = "%m/%d/%Y"

# lubridate-style labels, week starting on Sunday
WEEKDAY_ORDER = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
HOURS = list(range(24))
LATE_NIGHT_START = 22
LATE_NIGHT_END = 5

MISSING_LOCATION = "(missing)"
# real values that spell the placeholder are renamed so missing stays its own group
RECORDED_MISSING_LOCATION = "(missing) [as recorded]"
TOP_N = 10
PARSE_POLICIES = ("coerce", "warn", "raise")

FIGURE_DPI = 150
PALETTE = {
    "navy": "#0B1F3A",
    "crimson": "#C43F3A",
}


@dataclass
class ReportConfig:
    source: str = DATA_URL
    report_path: Path = REPORT_PATH
    figures_dir: Path = FIGURES_DIR
    limit: int | None = None
    top_n: int = TOP_N
    parse_policy: str = "coerce"  # "coerce" | "warn" | "raise"
    timeout: float = REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if self.parse_policy not in PARSE_POLICIES:
            raise ValueError(
                f"Unknown parse policy '{self.parse_policy}'; expected one of {', '.join(PARSE_POLICIES)}."
            )
        if self.top_n < 1:
            raise ValueError("top_n must be a positive integer.")
        self.report_path = Path(self.report_path)
        self.figures_dir = Path(self.figures_dir)
