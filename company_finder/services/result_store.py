from __future__ import annotations

from company_finder.models.company import CompanyRecord


class LatestResultStore:
    """Single slot holding the last finished batch, per serving process."""

    def __init__(self) -> None:
        self._results: list[CompanyRecord] = []

    def clear(self) -> None:
        self._results = []

    def store(self, results: list[CompanyRecord]) -> None:
        self._results = list(results)

    def get(self) -> list[CompanyRecord]:
        return list(self._results)
