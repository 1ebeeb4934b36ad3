"""Command-line interface for the loan accrual engine.

This module uses the ``click`` library to implement a multi-command
interface. Loans and lenders are read from JSON documents; users can print a
loan snapshot, its per-year ledger, lender totals or a portfolio overview.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import click

from .config import get_settings
from .data_models import (
    DurationUnit,
    FileRecord,
    InterestMethod,
    Loan,
    LoanSnapshot,
    Note,
    PaymentType,
    TerminationType,
    Transaction,
    TransactionType,
    YearAccrualEntry,
)
from .engine import accrual_by_year
from .errors import AccrualError, LoanDataError
from .formatter import print_lender, print_portfolio, print_snapshot, print_transactions, print_years
from .portfolio import calculate_lender, status_breakdown, yearly_totals
from .snapshot import snapshot
from .utils import decimal_from_str, parse_date

logger = logging.getLogger(__name__)


def _enum(enum_type, value: Any, field_name: str):
    try:
        return enum_type(str(value).upper())
    except ValueError as exc:
        raise LoanDataError(f"Invalid {field_name}: {value}") from exc


def _optional_date(value: Optional[str]) -> Optional[date]:
    return parse_date(value) if value else None


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise LoanDataError(f"Invalid {field_name}: {value}") from exc


def transaction_from_dict(data: Dict[str, Any]) -> Transaction:
    try:
        return Transaction(
            id=str(data["id"]),
            type=_enum(TransactionType, data["type"], "transaction type"),
            date=parse_date(data["date"]),
            amount=decimal_from_str(data["amount"]),
            payment_type=_enum(PaymentType, data.get("payment_type", "BANK"), "payment type"),
        )
    except KeyError as exc:
        raise LoanDataError(f"Transaction is missing field {exc.args[0]}") from exc


def loan_from_dict(data: Dict[str, Any]) -> Loan:
    """Build a ``Loan`` from a JSON document.

    Amounts and rates should be given as strings (``"10000.00"``) so they are
    read exactly; dates as ``YYYY-MM-DD``.
    """
    try:
        method = data.get("alt_interest_method")
        try:
            alt_method = InterestMethod.parse(method) if method else None
        except ValueError as exc:
            raise LoanDataError(str(exc)) from exc
        return Loan(
            id=str(data["id"]),
            amount=decimal_from_str(data["amount"]),
            interest_rate=decimal_from_str(data["interest_rate"]),
            sign_date=parse_date(data["sign_date"]),
            termination_type=_enum(TerminationType, data["termination_type"], "termination type"),
            end_date=_optional_date(data.get("end_date")),
            notice_period=_optional_int(data.get("notice_period"), "notice period"),
            notice_period_unit=_enum(DurationUnit, data.get("notice_period_unit", "MONTHS"), "notice period unit"),
            duration=_optional_int(data.get("duration"), "duration"),
            duration_unit=_enum(DurationUnit, data.get("duration_unit", "YEARS"), "duration unit"),
            termination_date=_optional_date(data.get("termination_date")),
            alt_interest_method=alt_method,
            transactions=tuple(transaction_from_dict(t) for t in data.get("transactions", [])),
            notes=tuple(
                Note(id=str(n["id"]), text=n.get("text", ""), public=bool(n.get("public", False)))
                for n in data.get("notes", [])
            ),
            files=tuple(
                FileRecord(
                    id=str(f["id"]),
                    name=f.get("name", ""),
                    public=bool(f.get("public", False)),
                    data=f["data"].encode("utf-8") if f.get("data") else None,
                )
                for f in data.get("files", [])
            ),
        )
    except KeyError as exc:
        raise LoanDataError(f"Loan is missing field {exc.args[0]}") from exc


def load_document(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise LoanDataError(f"{path}: invalid JSON ({exc})") from exc


def load_lender(path: Path) -> Tuple[Optional[str], List[Loan]]:
    """Read a lender document (``{"id": ..., "loans": [...]}``).

    Returns the lender id (``None`` when missing) and the lender's loans.
    """
    document = load_document(path)
    lender_id = document.get("id")
    loans = [loan_from_dict(raw) for raw in document.get("loans", [])]
    return (str(lender_id) if lender_id is not None else None), loans


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums, dates and decimals into JSON values."""
    if is_dataclass(value):
        return {k: to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def export_to_json(path: Path, data: Any) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(to_jsonable(data), f, indent=2)


def export_years_to_csv(path: Path, entries: Iterable[YearAccrualEntry]) -> None:
    """Export the per-year ledger to a CSV file."""
    header = [
        "Year",
        "Begin",
        "Deposits",
        "Withdrawals",
        "Not_Reclaimed",
        "Interest_Paid",
        "Interest",
        "Interest_Base_Amount",
        "End",
        "Interest_Error",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in entries:
            writer.writerow(
                [
                    e.year,
                    str(e.begin),
                    str(e.deposits),
                    str(e.withdrawals),
                    str(e.not_reclaimed),
                    str(e.interest_paid),
                    str(e.interest),
                    str(e.interest_base_amount),
                    str(e.end),
                    str(e.interest_error),
                ]
            )


def export_transactions_to_csv(path: Path, snap: LoanSnapshot) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Id", "Date", "Type", "Amount", "Payment_Type"])
        for t in snap.transactions:
            writer.writerow([t.id, t.date.isoformat(), t.type.value, str(t.amount), t.payment_type.value])


def _resolve_method(method: Optional[str]) -> Optional[InterestMethod]:
    try:
        if method:
            return InterestMethod.parse(method)
        return get_settings().interest_method()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--method") from exc


def _as_of(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_date(value)
    except LoanDataError as exc:
        raise click.BadParameter(str(exc), param_hint="--as-of") from exc


def _output_path(output: str, allowed: Iterable[str]) -> Path:
    path = Path(output)
    if path.suffix.lower() not in allowed:
        raise click.BadParameter(
            f"Unsupported output format; use {' or '.join(allowed)}", param_hint="--output"
        )
    return path


@click.group()
def cli() -> None:
    """Interest and balance calculations for loan ledgers."""
    get_settings().configure_logging()


as_of_option = click.option("--as-of", "as_of", help="Reference date (YYYY-MM-DD), default today")
method_option = click.option(
    "--method", "method", help="Project default interest method, e.g. ACT_365_NOCOMPOUND"
)


@cli.command("snapshot")
@click.argument("loan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@as_of_option
@click.option("--interest-year", "interest_year", type=int, help="Year reported as interest of year")
@method_option
@click.option("--client", is_flag=True, help="Only include public notes and files")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def snapshot_command(
    loan_file: Path,
    as_of: Optional[str],
    interest_year: Optional[int],
    method: Optional[str],
    client: bool,
    output: Optional[str],
) -> None:
    """Compute and print the state of a loan."""
    try:
        loan = loan_from_dict(load_document(loan_file))
        snap = snapshot(loan, _as_of(as_of), interest_year, client, _resolve_method(method))
    except AccrualError as exc:
        raise click.ClickException(str(exc)) from exc
    if output:
        path = _output_path(output, (".json", ".csv"))
        if path.suffix.lower() == ".json":
            export_to_json(path, snap)
        else:
            export_transactions_to_csv(path, snap)
        click.echo(f"Snapshot exported to {path}")
        return
    print_snapshot(snap)
    print_transactions(snap.transactions)


@cli.command("years")
@click.argument("loan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@as_of_option
@method_option
@click.option("--exclude", "exclude", help="Transaction id to leave out of the calculation")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def years_command(
    loan_file: Path,
    as_of: Optional[str],
    method: Optional[str],
    exclude: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the per-year ledger of a loan."""
    try:
        loan = loan_from_dict(load_document(loan_file))
        entries = accrual_by_year(loan, _as_of(as_of), exclude, _resolve_method(method))
    except AccrualError as exc:
        raise click.ClickException(str(exc)) from exc
    if output:
        path = _output_path(output, (".json", ".csv"))
        if path.suffix.lower() == ".json":
            export_to_json(path, {"loan_id": loan.id, "years": entries})
        else:
            export_years_to_csv(path, entries)
        click.echo(f"Years exported to {path}")
        return
    if not entries:
        click.echo(f"Loan {loan.id} has no transactions up to the reference date.")
        return
    print_years(entries)


@cli.command("lender")
@click.argument("lender_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@as_of_option
@method_option
@click.option("--output", "output", type=str, help="Output file path (.json)")
def lender_command(lender_file: Path, as_of: Optional[str], method: Optional[str], output: Optional[str]) -> None:
    """Compute and print the totals over a lender's loans."""
    try:
        lender_id, loans = load_lender(lender_file)
        totals = calculate_lender(loans, _as_of(as_of), default_method=_resolve_method(method))
    except AccrualError as exc:
        raise click.ClickException(str(exc)) from exc
    if output:
        path = _output_path(output, (".json",))
        export_to_json(path, dict(to_jsonable(totals), lender_id=lender_id))
        click.echo(f"Lender totals exported to {path}")
        return
    max_rows = get_settings().max_rows
    if totals.total_loans > max_rows:
        click.echo(f"Lender has {totals.total_loans} loans; listing the newest {max_rows}.")
    print_lender(totals, lender_id, max_rows)


@cli.command("portfolio")
@click.argument("lender_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--from-year", "from_year", type=int, required=True, help="First year of the yearly table")
@click.option("--to-year", "to_year", type=int, help="Last year of the yearly table, default as-of year")
@as_of_option
@method_option
def portfolio_command(
    lender_files: List[Path],
    from_year: int,
    to_year: Optional[int],
    as_of: Optional[str],
    method: Optional[str],
) -> None:
    """Print the status breakdown and yearly totals across lenders."""
    reference = _as_of(as_of)
    default_method = _resolve_method(method)
    try:
        loans = [loan for path in lender_files for loan in load_lender(path)[1]]
        snapshots = [snapshot(loan, reference, default_method=default_method) for loan in loans]
        rows = yearly_totals(loans, from_year, to_year or reference.year, default_method)
    except AccrualError as exc:
        raise click.ClickException(str(exc)) from exc
    logger.info("Evaluated %d loans from %d files", len(loans), len(lender_files))
    print_portfolio(status_breakdown(snapshots), rows)


if __name__ == "__main__":
    cli()
