"""Prompt catalog bundled as ``company_finder/prompts/prompts.json``.

Entries are ``string.Template`` strings addressed by dotted keys, e.g.
``render_prompt("search.basic_query", company_name="...")``.
"""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from string import Template
from typing import Any

PROMPTS_PACKAGE = "company_finder.prompts"
PROMPTS_FILE = "prompts.json"


@lru_cache(maxsize=1)
def load_catalog() -> dict[str, Any]:
    raw = resources.files(PROMPTS_PACKAGE).joinpath(PROMPTS_FILE).read_text(encoding="utf-8")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Prompt catalog must be a JSON object.")
    return payload


def get_template(key: str) -> Template:
    node: Any = load_catalog()
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(f"Prompt key not found: {key}")
        node = node[part]
    if not isinstance(node, str):
        raise TypeError(f"Prompt key must map to a string: {key}")
    return Template(node)


def render_prompt(key: str, **values: Any) -> str:
    template = get_template(key)
    try:
        return template.substitute(**values)
    except KeyError as exc:
        missing = str(exc.args[0])
        raise KeyError(f"Missing template value '{missing}' for prompt '{key}'") from exc
