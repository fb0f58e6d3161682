"""Error taxonomy for the company lookup pipeline.

Everything raised inside a single company's run is converted into a Failed
``CompanyRecord`` by the orchestrator; only ``InputValidationError`` is meant
to reach the HTTP layer.
"""
from __future__ import annotations


class CompanyFinderError(Exception):
    """Base class for all lookup errors."""


class InputValidationError(CompanyFinderError):
    """Batch input is empty, oversized or otherwise malformed."""


class CredentialsMissingError(CompanyFinderError):
    """A required API credential is not configured."""

    def __init__(self, missing: list[str] | None = None):
        self.missing = list(missing or [])
        detail = f": {', '.join(self.missing)}" if self.missing else ""
        super().__init__(f"API credentials are not configured{detail}")


class SearchError(CompanyFinderError):
    pass


class SearchUnavailableError(SearchError):
    """Network failure, timeout or rejection from the search provider."""

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class NoResultsError(SearchError):
    """The provider answered but returned no items for the query."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f'No search results found for "{query}"')


class UnparsableResponseError(CompanyFinderError):
    """Model output did not contain a JSON object."""


class RetryExhaustedError(CompanyFinderError):
    def __init__(self, last_error: BaseException, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")


class ModelCallError(CompanyFinderError):
    """Terminal language-model failure for one company."""

    stage = "model"

    def __init__(self, last_error: BaseException, attempts: int = 1):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Language model {self.stage} failed after {attempts} attempt(s): {last_error}")


class ExtractionFailedError(ModelCallError):
    stage = "extraction"


class VerificationFailedError(ModelCallError):
    stage = "verification"
