"""Builds the model prompts and search queries for one company lookup."""
from __future__ import annotations

import json
import re
from typing import Any, Iterable

from company_finder.models.company import RECORD_FIELDS, SearchResult
from company_finder.services.prompt_store import render_prompt

_WHITESPACE = re.compile(r"\s+")


def _serialize(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def serialize_search_results(results: Iterable[SearchResult]) -> str:
    return _serialize([r.to_dict() for r in results])


def build_extraction_prompt(company_name: str, search_results: Iterable[SearchResult]) -> str:
    return render_prompt(
        "extraction.user_prompt",
        company_name=company_name,
        search_results=serialize_search_results(search_results),
    )


def build_verification_prompt(
    company_name: str,
    first_pass_record: dict[str, Any],
    second_search_results: Iterable[SearchResult],
) -> str:
    first_pass = {name: first_pass_record.get(name, "") for name in RECORD_FIELDS}
    return render_prompt(
        "verification.user_prompt",
        company_name=company_name,
        first_pass_record=_serialize(first_pass),
        search_results=serialize_search_results(second_search_results),
    )


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def build_basic_query(company_name: str) -> str:
    return _collapse(render_prompt("search.basic_query", company_name=company_name))


def build_additional_query(company_name: str, first_pass_record: dict[str, Any]) -> str:
    """Second search query, most specific known fact first."""
    postal_code = str(first_pass_record.get("postalCode") or "").strip()
    prefecture = str(first_pass_record.get("prefecture") or "").strip()
    city = str(first_pass_record.get("city") or "").strip()
    representative_name = str(first_pass_record.get("representativeName") or "").strip()

    if postal_code:
        query = render_prompt("search.postal_code_query", company_name=company_name, postal_code=postal_code)
    elif prefecture or city:
        query = render_prompt(
            "search.location_query",
            company_name=company_name,
            prefecture=prefecture,
            city=city,
        )
    elif representative_name:
        query = render_prompt(
            "search.representative_query",
            company_name=company_name,
            representative_name=representative_name,
        )
    else:
        query = render_prompt("search.generic_query", company_name=company_name)
    return _collapse(query)
