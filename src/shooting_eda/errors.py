class ShootingReportError(Exception):
    """Base class for report failures."""


class DatasetLoadError(ShootingReportError):
    """The source dataset could not be fetched, read or lacks required columns."""


class RecordParseError(ShootingReportError, ValueError):
    """Date or time values failed to parse under the strict parse policy."""


class ModelFitError(ShootingReportError):
    """No usable rows were left for the late-night model."""
