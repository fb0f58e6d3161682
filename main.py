"""company-finder

Simple CLI for looking up a batch of companies, or serving the API.
"""

import argparse
import asyncio
from pathlib import Path
from typing import Any

from company_finder.agents.orchestrator import CompanyLookupOrchestrator
from company_finder.config import settings
from company_finder.errors import InputValidationError
from company_finder.services.batch_runner import validate_company_names
from company_finder.services.broadcast import ChannelHub
from company_finder.services.export import results_to_csv


class ConsolePrinter:
    """Channel client that prints progress events."""

    async def send(self, message: dict[str, Any]) -> None:
        event_type = message.get("type")

        if event_type == "search_start":
            print(f"[*] Looking up {message['totalCompanies']} companies")

        elif event_type == "search_progress":
            print(f"  [{message['stepNumber']}] {message['company']}: {message['step']}")

        elif event_type == "search_complete":
            if message["success"]:
                print(f"  [+] {message['company']} done")
            else:
                print(f"  [!] {message['company']} failed: {message['error']}")

        elif event_type == "all_search_complete":
            print(
                f"\n[*] Finished: {message['successCount']} ok, "
                f"{message['errorCount']} failed of {message['totalCompanies']}"
            )


async def run_lookup(companies: list[str], csv_path: str | None = None):
    hub = ChannelHub()
    hub.register(ConsolePrinter())
    orchestrator = CompanyLookupOrchestrator(hub)
    results = await orchestrator.process_batch(companies)

    for record in results:
        data = record.to_dict()
        if record.error_occurred:
            print(f"{record.company_name}: ERROR {record.error}")
        else:
            print(
                f"{record.company_name}: 〒{data['postalCode']} {data['prefecture']}{data['city']}{data['address']} "
                f"/ {data['representativeTitle']} {data['representativeName']}"
            )

    if csv_path:
        Path(csv_path).write_text(
            results_to_csv(results, include_bom=settings.csv_include_bom),
            encoding="utf-8",
        )
        print(f"\nCSV written to {csv_path}")


def main():
    parser = argparse.ArgumentParser(description="Japanese company metadata lookup")
    parser.add_argument("--company", "-c", action="append", default=[], help="Company name (repeatable)")
    parser.add_argument("--file", "-f", help="Text file with one company name per line")
    parser.add_argument("--csv", help="Write results as CSV to this path")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP/WebSocket server")

    args = parser.parse_args()

    if args.serve:
        import uvicorn

        uvicorn.run("company_finder.main:app", host=settings.host, port=settings.port)
        return

    companies = list(args.company)
    if args.file:
        companies.extend(Path(args.file).read_text(encoding="utf-8").splitlines())

    try:
        names = validate_company_names(companies, dedupe=True)
    except InputValidationError as exc:
        parser.error(str(exc))

    asyncio.run(run_lookup(names, args.csv))


if __name__ == "__main__":
    main()
