"""Custom exception hierarchy for the Stock Analyzer application.

Market-data failures inherit from DataFetchError, which carries contextual
information about what went wrong during retrieval.  Recommendation and
batch failures form their own branches so callers can tell them apart.
"""


class DataFetchError(Exception):
    """Base exception for all market-data fetching failures.

    Attributes:
        ticker: The ticker symbol involved in the failure.
        source: The data source that failed (e.g., "polygon").
        http_status: The HTTP status code, if the failure was HTTP-related.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        source: str,
        http_status: int | None = None,
    ) -> None:
        self.ticker = ticker
        self.source = source
        self.http_status = http_status
        super().__init__(message)


class TickerNotFoundError(DataFetchError):
    """Raised when the vendor has no data for a ticker symbol."""


class DataSourceUnavailableError(DataFetchError):
    """Raised when a data source is unreachable or returning errors."""


class RecommendationError(Exception):
    """Raised when the language model fails to produce a usable recommendation.

    Attributes:
        ticker: The ticker the recommendation was requested for.
        model: The model name that was called, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        model: str | None = None,
    ) -> None:
        self.ticker = ticker
        self.model = model
        super().__init__(message)


class BatchAnalysisError(Exception):
    """Raised when any ticker in an analysis run fails, aborting the run.

    Attributes:
        ticker: The ticker whose failure aborted the run.
        cause: The underlying DataFetchError or RecommendationError.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        cause: Exception,
    ) -> None:
        self.ticker = ticker
        self.cause = cause
        super().__init__(message)


class AnalysisInProgressError(Exception):
    """Raised when an analysis run is requested while another is still running."""


class InvalidTickerError(ValueError):
    """Raised when a ticker symbol fails normalization or validation."""
