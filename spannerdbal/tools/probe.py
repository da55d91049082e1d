"""Check Spanner connection parameters and list the databases of an instance."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Sequence

from spannerdbal.driver import Driver
from spannerdbal.errors import ConfigurationError


@dataclasses.dataclass
class ProbeReport:
    instance: str
    databases: list[str] = dataclasses.field(default_factory=list)
    dbname: str | None = None
    dbname_exists: bool | None = None


def probe(
    *,
    instance: str,
    dbname: str | None = None,
    project: str | None = None,
    credentials: str | None = None,
    driver: Driver | None = None,
) -> ProbeReport:
    driver = driver or Driver()
    driver.get_instance(instance, project=project, credentials=credentials)
    report = ProbeReport(instance=instance, databases=sorted(driver.list_databases(instance)))
    if dbname is not None:
        report.dbname = dbname
        report.dbname_exists = dbname in report.databases
    return report


def _print_report(report: ProbeReport) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title=f"Databases on instance '{report.instance}'")
    table.add_column("Database", style="cyan")
    for name in report.databases:
        table.add_row(name)
    console.print(table)

    if report.dbname is not None:
        if report.dbname_exists:
            console.print(f"[green]Found[/green] database '{report.dbname}'")
        else:
            console.print(f"[red]Missing[/red] database '{report.dbname}'")


def main(argv: Sequence[str] | None = None, *, driver: Driver | None = None) -> int:
    p = argparse.ArgumentParser(description="Check Spanner connection parameters and list databases")
    p.add_argument("--instance", required=True, help="Spanner instance id")
    p.add_argument("--dbname", default=None, help="Database id expected on the instance")
    p.add_argument("--project", default=None, help="Google Cloud project (defaults to the credentials' project)")
    p.add_argument(
        "--credentials",
        default=None,
        help="Service-account key file (defaults to $GOOGLE_APPLICATION_CREDENTIALS)",
    )
    p.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = p.parse_args(argv)

    try:
        report = probe(
            instance=args.instance,
            dbname=args.dbname,
            project=args.project,
            credentials=args.credentials,
            driver=driver,
        )
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(dataclasses.asdict(report), indent=2, sort_keys=True))
    else:
        _print_report(report)

    if report.dbname is not None and not report.dbname_exists:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
