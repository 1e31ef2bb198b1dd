"""Daily insight error taxonomy.

Only a missing snapshot, an unknown question or nutrient id, and an
unsupported model host propagate to callers.
Model problems are resolved with the deterministic fallback narrative
and download problems are reported through result objects.
"""


class InsightEngineError(Exception):
    """Base class for daily insight errors."""


class DataUnavailableError(InsightEngineError):
    """No snapshot could be collected for today."""

    def __init__(self, date: str) -> None:
        self.date = date
        super().__init__(f"No nutrition snapshot available for {date}")


class UnknownQuestionError(InsightEngineError):
    """The question id is not part of the catalog."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(f"Unknown question id: {question_id}")


class UnknownNutrientError(InsightEngineError):
    """The nutrient id is not tracked."""

    def __init__(self, nutrient_id: str) -> None:
        self.nutrient_id = nutrient_id
        super().__init__(f"Unknown nutrient id: {nutrient_id}")


class ModelUnavailableError(InsightEngineError):
    """The on-device model cannot serve a generation right now."""


class ModelDownloadError(InsightEngineError):
    """The model file could not be downloaded."""


class ModelDownloadCancelledError(ModelDownloadError):
    """The model download was cancelled by the user."""
