from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from company_finder.config import settings
from company_finder.errors import InputValidationError
from company_finder.models.company import CompanyRecord
from company_finder.models.schemas import ExportRequest
from company_finder.services.export import results_to_csv, results_to_tsv

router = APIRouter(prefix="/api", tags=["export"])


@router.post("/export")
async def export_results(request: ExportRequest):
    """Turn a result list into CSV (download) or tab separated clipboard text."""
    if not request.results:
        raise InputValidationError("Invalid input. Please provide an array of company results.")

    records = [CompanyRecord.from_dict(item) for item in request.results]

    if request.format == "tsv":
        return PlainTextResponse(results_to_tsv(records), media_type="text/tab-separated-values; charset=utf-8")

    include_bom = settings.csv_include_bom if request.bom is None else request.bom
    return Response(
        content=results_to_csv(records, include_bom=include_bom),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=company_info.csv"},
    )
