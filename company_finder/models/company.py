from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Any

# Serialized (camelCase) names of the six business fields, in export order.
RECORD_FIELDS: tuple[str, ...] = (
    "postalCode",
    "prefecture",
    "city",
    "address",
    "representativeTitle",
    "representativeName",
)


@dataclass(slots=True)
class SearchResult:
    title: str
    link: str
    snippet: str
    placeholder: bool = False

    def to_dict(self) -> dict[str, str]:
        # The placeholder flag is internal and never shown to the model.
        return {"title": self.title, "link": self.link, "snippet": self.snippet}


@dataclass(slots=True)
class CompanyRecord:
    """Terminal result of one company lookup: Resolved or Failed."""

    company_name: str
    postal_code: str = ""
    prefecture: str = ""
    city: str = ""
    address: str = ""
    representative_title: str = ""
    representative_name: str = ""
    error: str | None = None
    degraded: bool = False

    @property
    def error_occurred(self) -> bool:
        return self.error is not None

    @classmethod
    def resolved(cls, company_name: str, fields: dict[str, Any], *, degraded: bool = False) -> "CompanyRecord":
        info = coerce_record_fields(fields)
        return cls(
            company_name=company_name,
            postal_code=info["postalCode"],
            prefecture=info["prefecture"],
            city=info["city"],
            address=info["address"],
            representative_title=info["representativeTitle"],
            representative_name=info["representativeName"],
            degraded=degraded,
        )

    @classmethod
    def failed(cls, company_name: str, error: str) -> "CompanyRecord":
        return cls(company_name=company_name, error=error.strip() or "Unknown error occurred")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompanyRecord":
        name = _as_text(data.get("companyName"))
        if data.get("errorOccurred"):
            return cls.failed(name, _as_text(data.get("error")))
        return cls.resolved(name, data, degraded=bool(data.get("degraded")))

    def business_fields(self) -> dict[str, str]:
        return {
            "postalCode": self.postal_code,
            "prefecture": self.prefecture,
            "city": self.city,
            "address": self.address,
            "representativeTitle": self.representative_title,
            "representativeName": self.representative_name,
        }

    def to_dict(self) -> dict[str, Any]:
        if self.error_occurred:
            return {
                "companyName": self.company_name,
                "errorOccurred": True,
                "error": self.error,
            }
        data: dict[str, Any] = {"companyName": self.company_name, **self.business_fields()}
        if self.degraded:
            data["degraded"] = True
        return data


@dataclass(slots=True)
class ProgressEvent:
    company: str
    step: str
    step_number: int | str

    def to_dict(self) -> dict[str, Any]:
        return {"company": self.company, "step": self.step, "stepNumber": self.step_number}


@dataclass(slots=True)
class BatchSummary:
    total_companies: int
    results: list[CompanyRecord] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if not r.error_occurred)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.error_occurred)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def normalize_postal_code(value: Any) -> str:
    """Return 7 bare ASCII digits, or "" when the value is not a postal code."""
    text = unicodedata.normalize("NFKC", _as_text(value))
    digits = "".join(ch for ch in text if ch in "0123456789")
    return digits if len(digits) == 7 else ""


def coerce_record_fields(data: dict[str, Any]) -> dict[str, str]:
    """Coerce arbitrary model output into the six string fields."""
    info = {name: _as_text(data.get(name)) for name in RECORD_FIELDS}
    info["postalCode"] = normalize_postal_code(info["postalCode"])
    return info


def all_fields_empty(data: dict[str, str]) -> bool:
    return not any(data.get(name) for name in RECORD_FIELDS)
