from __future__ import annotations

import csv
import io
from typing import Iterable

from company_finder.models.company import RECORD_FIELDS, CompanyRecord

CSV_HEADERS = ["会社名", "郵便番号", "都道府県", "市区町村", "番地", "代表者役職", "代表者名"]
UTF8_BOM = "\ufeff"


def _row(record: CompanyRecord) -> list[str]:
    fields = record.business_fields()
    return [record.company_name, *(fields[name] for name in RECORD_FIELDS)]


def results_to_csv(results: Iterable[CompanyRecord], *, include_bom: bool = False) -> str:
    """Render records as CSV; failed lookups keep their name with empty cells."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for record in results:
        writer.writerow(_row(record))
    text = output.getvalue()
    return UTF8_BOM + text if include_bom else text


def results_to_tsv(results: Iterable[CompanyRecord]) -> str:
    """Tab separated text of resolved records, for pasting into spreadsheets."""
    lines = ["\t".join(CSV_HEADERS)]
    for record in results:
        if record.error_occurred:
            continue
        cells = [cell.replace("\t", " ").replace("\r", " ").replace("\n", " ") for cell in _row(record)]
        lines.append("\t".join(cells))
    return "\n".join(lines) + "\n"


def parse_csv(text: str) -> list[dict[str, str]]:
    """Read an exported CSV back into header-keyed rows."""
    if text.startswith(UTF8_BOM):
        text = text[len(UTF8_BOM):]
    return list(csv.DictReader(io.StringIO(text)))
