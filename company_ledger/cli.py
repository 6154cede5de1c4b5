"""CLI for the ``company_ledger`` package.

A Typer console app where each command performs one user action against the
persisted ledger: add, edit or delete an entry, list a filtered view, export
it, or share a summary. Environment variables are loaded from a local
``.env`` using ``python-dotenv`` before any settings are resolved. Business
logic lives in :mod:`company_ledger.ledger` and the exporters.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from .config import LedgerSettings
from .errors import EntryValidationError, LedgerError
from .ledger import Ledger
from .logging_setup import configure_logging
from .models import ALL_CATEGORIES, Composing, EntryDraft, LedgerEntry
from .report import format_money, format_optional_money, summarize
from .storage import storage_from_settings

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record credit/debit entries against companies and categories, keep a "
        "running balance, and export or share the ledger. Loads settings from "
        "a local .env before running."
    ),
)


# ---- Small module-level helpers used by CLI commands -------------------------


def _settings(ctx: typer.Context) -> LedgerSettings:
    if isinstance(ctx.obj, LedgerSettings):
        return ctx.obj
    return LedgerSettings.from_env()


def _open_ledger(settings: LedgerSettings) -> Ledger:
    return Ledger.open(storage_from_settings(settings))


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _parse_date(raw: str | None) -> dt.date | None:
    if raw is None:
        return None
    try:
        return dt.date.fromisoformat(raw.strip())
    except ValueError:
        raise EntryValidationError("date", f"Invalid date {raw!r}; expected YYYY-MM-DD") from None


def _format_row(e: LedgerEntry, symbol: str) -> str:
    return "  ".join(
        [
            f"{e.id:>13}",
            e.date.isoformat(),
            f"{e.company_name[:24]:<24}",
            f"{e.particular[:28]:<28}",
            f"{e.category:<10}",
            f"{format_optional_money(e.credit, symbol=symbol):>12}",
            f"{format_optional_money(e.debit, symbol=symbol):>12}",
            f"{format_money(e.balance, symbol=symbol):>12}",
        ]
    )


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
SEARCH_OPTION = typer.Option("--search", "-s", help="Case-insensitive search term.")
CATEGORY_FILTER_OPTION = typer.Option(
    "--category", "-c", help="Category to filter by, or 'all'."
)


# ---- Commands ----------------------------------------------------------------


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    *,
    company: str | None = typer.Option(None, "--company", help="Company name (required)."),
    category: str | None = typer.Option(None, "--category", help="Entry category (required)."),
    particular: str = typer.Option("", "--particular", help="Free-text description."),
    credit: str | None = typer.Option(None, "--credit", help="Credit amount."),
    debit: str | None = typer.Option(None, "--debit", help="Debit amount."),
    date: str | None = typer.Option(None, "--date", help="Entry date (YYYY-MM-DD, default today)."),
    interactive: bool = typer.Option(
        True, help="Prompt for missing company, category and amount."
    ),
) -> None:
    """Add a new entry at the end of the ledger."""

    settings = _settings(ctx)
    ledger = _open_ledger(settings)
    try:
        entry_date = _parse_date(date)
        state: Composing = ledger.new_draft()
        draft = EntryDraft(
            company_name=company or "",
            category=category or "",
            particular=particular,
            credit=credit,
            debit=debit,
            date=entry_date or state.draft.date,
        )
        if interactive and sys.stdin.isatty():
            from .term_ui import complete_draft

            draft = complete_draft(draft)
        entry = ledger.add(draft)
    except LedgerError as e:
        raise _fail(str(e)) from e

    typer.echo(
        f"Added entry {entry.id}; balance {format_money(entry.balance, symbol=settings.currency_symbol)}"
    )


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    entry_id: int = typer.Argument(..., help="Id of the entry to edit."),
    *,
    company: str | None = typer.Option(None, "--company", help="New company name."),
    category: str | None = typer.Option(None, "--category", help="New category."),
    particular: str | None = typer.Option(None, "--particular", help="New description."),
    credit: str | None = typer.Option(
        None, "--credit", help="New credit amount (clears the debit unless --debit is given)."
    ),
    debit: str | None = typer.Option(
        None, "--debit", help="New debit amount (clears the credit unless --credit is given)."
    ),
    date: str | None = typer.Option(None, "--date", help="New date (YYYY-MM-DD)."),
) -> None:
    """Edit an entry in place; its position in the ledger does not change."""

    settings = _settings(ctx)
    ledger = _open_ledger(settings)
    state = ledger.begin_edit(entry_id)
    if state is None:
        typer.echo(f"No entry with id {entry_id}; nothing to edit.")
        return

    changes: dict[str, object] = {}
    if company is not None:
        changes["company_name"] = company
    if category is not None:
        changes["category"] = category
    if particular is not None:
        changes["particular"] = particular
    if credit is not None:
        changes["credit"] = credit
        if debit is None:
            changes["debit"] = None
    if debit is not None:
        changes["debit"] = debit
        if credit is None:
            changes["credit"] = None
    try:
        entry_date = _parse_date(date)
        if entry_date is not None:
            changes["date"] = entry_date
        ledger.save(dataclasses.replace(state, draft=dataclasses.replace(state.draft, **changes)))
    except LedgerError as e:
        raise _fail(str(e)) from e

    updated = ledger.get(entry_id)
    if updated is None:
        raise _fail(f"entry {entry_id} disappeared while saving")
    typer.echo(
        f"Updated entry {entry_id}; balance "
        f"{format_money(updated.balance, symbol=settings.currency_symbol)}"
    )


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    entry_id: int = typer.Argument(..., help="Id of the entry to delete."),
) -> None:
    """Delete an entry; balances after it are recomputed."""

    ledger = _open_ledger(_settings(ctx))
    if ledger.delete(entry_id):
        typer.echo(f"Deleted entry {entry_id}.")
    else:
        typer.echo(f"No entry with id {entry_id}; nothing to delete.")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    *,
    search: Annotated[str, SEARCH_OPTION] = "",
    category: Annotated[str, CATEGORY_FILTER_OPTION] = ALL_CATEGORIES,
) -> None:
    """Show the filtered ledger with a summary line."""

    settings = _settings(ctx)
    ledger = _open_ledger(settings)
    entries = ledger.view(search, category).entries
    if not entries:
        typer.echo("No entries.")
        return
    for e in entries:
        typer.echo(_format_row(e, settings.currency_symbol))
    s = summarize(entries)
    sym = settings.currency_symbol
    typer.echo(
        f"{len(entries)} entries  credit {format_money(s.total_credit, symbol=sym)}  "
        f"debit {format_money(s.total_debit, symbol=sym)}  "
        f"balance {format_money(s.ending_balance, symbol=sym)}"
    )


@app.command("export-xlsx")
def export_xlsx_cmd(
    ctx: typer.Context,
    *,
    search: Annotated[str, SEARCH_OPTION] = "",
    category: Annotated[str, CATEGORY_FILTER_OPTION] = ALL_CATEGORIES,
    output: Path | None = typer.Option(None, "--output", "-o", help="Target .xlsx file."),
) -> None:
    """Export the filtered ledger to a spreadsheet."""

    from .exporters.spreadsheet import DEFAULT_FILENAME, export_spreadsheet

    settings = _settings(ctx)
    entries = _open_ledger(settings).view(search, category).entries
    try:
        path = export_spreadsheet(entries, output or settings.export_dir / DEFAULT_FILENAME)
    except LedgerError as e:
        raise _fail(str(e)) from e
    except OSError as e:
        raise _fail(f"could not write spreadsheet: {e}") from e
    typer.echo(f"Wrote {path}")


@app.command("export-pdf")
def export_pdf_cmd(
    ctx: typer.Context,
    *,
    search: Annotated[str, SEARCH_OPTION] = "",
    category: Annotated[str, CATEGORY_FILTER_OPTION] = ALL_CATEGORIES,
    output: Path | None = typer.Option(None, "--output", "-o", help="Target .pdf file."),
) -> None:
    """Export the filtered ledger as a PDF report."""

    from .exporters.pdf import export_pdf

    settings = _settings(ctx)
    entries = _open_ledger(settings).view(search, category).entries
    try:
        path = export_pdf(
            entries,
            output,
            directory=settings.export_dir,
            symbol=settings.currency_symbol,
        )
    except LedgerError as e:
        raise _fail(str(e)) from e
    except OSError as e:
        raise _fail(f"could not write report: {e}") from e
    typer.echo(f"Wrote {path}")


@app.command("share")
def share_cmd(
    ctx: typer.Context,
    *,
    open_link: bool = typer.Option(False, "--open", help="Open the share link in a browser."),
) -> None:
    """Print a summary of the whole ledger and a link to share it."""

    from .exporters.share import share_message, share_url

    settings = _settings(ctx)
    try:
        message = share_message(_open_ledger(settings).entries, symbol=settings.currency_symbol)
    except LedgerError as e:
        raise _fail(str(e)) from e

    url = share_url(message)
    typer.echo(message)
    typer.echo("")
    typer.echo(url)
    if open_link:
        import webbrowser

        webbrowser.open(url)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and resolves settings once for the
    invoked subcommand.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    ctx.obj = LedgerSettings.from_env()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m company_ledger.cli`
    app()
