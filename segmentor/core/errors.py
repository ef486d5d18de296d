# core/errors.py


class SegmentorError(Exception):
    """Base class for every error raised by the segmentation engine."""


class ConfigurationError(SegmentorError, ValueError):
    """
    Raised when a scale, midpoint or zone configuration cannot produce a
    valid grid geometry. Classification must not run against it.
    """


class MissingHeaderError(SegmentorError, ValueError):
    """
    Raised once per import when the required satisfaction/loyalty columns
    cannot be resolved from the header row.
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("❌ " + "; ".join(self.errors))
