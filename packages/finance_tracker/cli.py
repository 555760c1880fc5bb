"""CLI for the ``finance_tracker`` package.

Each subcommand loads the ledger from the database (``--database-url``, else
``DATABASE_URL``, else a local SQLite file), applies one change or query and,
for mutations, saves the full state back. Environment variables are loaded
from a local ``.env`` by the root callback before any command runs.
"""

from __future__ import annotations

import datetime as dt
import sys
import uuid
from decimal import Decimal
from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from .logging_setup import configure_logging, get_logger
from .models import Category, Transaction, TransactionType
from .money import format_currency, format_signed, to_amount
from .store import TransactionStore

_logger = get_logger("finance_tracker.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _open_store(database_url: str | None) -> TransactionStore:
    # Local import keeps `--help` free of engine creation
    from .persistence import SqlStateRepository

    try:
        return TransactionStore.load(SqlStateRepository(database_url=database_url))
    except SQLAlchemyError as e:
        _fail(f"failed to load ledger: {e}")


def _save(store: TransactionStore) -> None:
    try:
        store.save_all_data()
    except SQLAlchemyError as e:
        _fail(f"failed to save ledger: {e}")


def _database_url(ctx: typer.Context) -> str | None:
    obj = ctx.find_root().obj
    return obj.get("database_url") if isinstance(obj, dict) else None


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    raise typer.Exit(1)


def _parse_day(raw: str | None) -> dt.date:
    if raw is None:
        return dt.date.today()
    try:
        return dt.date.fromisoformat(raw.strip())
    except ValueError:
        _fail(f"invalid date '{raw}' (expected YYYY-MM-DD)")


def _parse_month(raw: str | None) -> dt.date:
    if raw is None:
        return dt.date.today().replace(day=1)
    try:
        year_s, month_s = raw.strip().split("-", 1)
        return dt.date(int(year_s), int(month_s), 1)
    except ValueError:
        _fail(f"invalid month '{raw}' (expected YYYY-MM)")


def _parse_amount(raw: str) -> Decimal:
    try:
        return to_amount(raw)
    except ValueError as e:
        _fail(str(e))


def _find_transaction(store: TransactionStore, token: str) -> Transaction:
    """Resolve a full id or a unique id prefix (as printed by ``list``)."""

    token = token.strip().lower()
    try:
        found = store.get_transaction(uuid.UUID(token))
    except ValueError:
        candidates = [t for t in store.transactions if str(t.id).startswith(token)]
        if len(candidates) > 1:
            _fail(f"transaction id prefix '{token}' is ambiguous")
        found = candidates[0] if candidates else None
    if found is None:
        _fail(f"no transaction with id '{token}'")
    return found


def _find_category(
    store: TransactionStore,
    name: str,
    tx_type: TransactionType | None = None,
    *,
    prefer_custom: bool = False,
) -> Category:
    wanted = name.strip()
    matches = [
        c
        for c in store.all_categories()
        if (c.name == wanted or str(c.id) == wanted)
        and (tx_type is None or c.default_type == tx_type or c.is_custom)
    ]
    if not matches:
        _fail(f"unknown category '{wanted}'")
    if prefer_custom:
        custom = [c for c in matches if c.is_custom]
        if len(custom) > 1:
            _fail(f"several custom categories are named '{wanted}'; pass the id instead")
        if custom:
            return custom[0]
    return matches[0]


def _format_row(t: Transaction) -> str:
    amount = t.amount if t.type == TransactionType.INCOME else -t.amount
    parts = [
        str(t.id)[:8],
        t.date.isoformat(),
        t.type.label,
        f"{t.category.icon} {t.category.name}".strip(),
        format_signed(amount),
    ]
    if t.note:
        parts.append(t.note)
    return "  ".join(parts)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Personal income/expense ledger with categories, monthly summaries and "
        "Chinese voice-transcript entry. Loads settings from a local .env."
    ),
)


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    amount: str = typer.Argument(..., help="Positive amount, e.g. 35.5"),
    *,
    tx_type: TransactionType = typer.Option(
        TransactionType.EXPENSE, "--type", case_sensitive=False, help="income or expense"
    ),
    category: str | None = typer.Option(
        None, help="Category name; defaults to the first category of the type."
    ),
    date: str | None = typer.Option(None, help="YYYY-MM-DD (defaults to today)."),
    note: str = typer.Option("", help="Free-text note."),
) -> None:
    """Record a transaction."""

    store = _open_store(_database_url(ctx))
    value = _parse_amount(amount)
    day = _parse_day(date)
    cat = (
        _find_category(store, category, tx_type)
        if category
        else store.catalog.default_category(tx_type)
    )
    tx = Transaction(amount=value, category=cat, type=tx_type, date=day, note=note.strip())
    store.add_transaction(tx)
    _save(store)
    print(f"Added {_format_row(tx)}")


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    tx_id: str = typer.Argument(..., help="Transaction id or unique prefix."),
    *,
    amount: str | None = typer.Option(None, help="New amount."),
    category: str | None = typer.Option(None, help="New category name."),
    date: str | None = typer.Option(None, help="New date (YYYY-MM-DD)."),
    note: str | None = typer.Option(None, help="New note."),
) -> None:
    """Change amount, category, date or note of a transaction (type is fixed)."""

    store = _open_store(_database_url(ctx))
    existing = _find_transaction(store, tx_id)
    updated = existing.edited(
        amount=_parse_amount(amount) if amount is not None else existing.amount,
        category=(
            _find_category(store, category, existing.type)
            if category is not None
            else existing.category
        ),
        date=_parse_day(date) if date is not None else existing.date,
        note=note.strip() if note is not None else existing.note,
    )
    if not store.update_transaction(updated):
        _fail(f"no transaction with id '{tx_id}'")
    _save(store)
    print(f"Updated {_format_row(updated)}")


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    tx_id: str = typer.Argument(..., help="Transaction id or unique prefix."),
) -> None:
    """Delete a transaction."""

    store = _open_store(_database_url(ctx))
    existing = _find_transaction(store, tx_id)
    store.delete_transaction(existing.id)
    _save(store)
    print(f"Deleted {str(existing.id)[:8]}")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    *,
    year: int | None = typer.Option(None, help="Only this year."),
    month: int | None = typer.Option(None, help="Only this month (requires --year)."),
    tx_type: TransactionType | None = typer.Option(
        None, "--type", case_sensitive=False, help="Only income or expense."
    ),
    category: str | None = typer.Option(None, help="Only this category."),
) -> None:
    """List transactions, newest first."""

    from .filters import build_filter

    store = _open_store(_database_url(ctx))
    cat = _find_category(store, category) if category else None
    try:
        flt = build_filter(year=year, month=month, tx_type=tx_type, category=cat)
    except ValueError as e:
        _fail(str(e))
    rows = store.sorted_transactions(flt)
    print(f"[{flt.display_name}] {len(rows)} transaction(s)")
    for t in rows:
        print(_format_row(t))


@app.command("summary")
def summary_cmd(
    ctx: typer.Context,
    *,
    month: str | None = typer.Option(None, help="YYYY-MM (defaults to this month)."),
) -> None:
    """Monthly income, expense, balance and category breakdown."""

    store = _open_store(_database_url(ctx))
    ref = _parse_month(month)
    income = store.monthly_income(ref)
    expense = store.monthly_expense(ref)
    delta = store.month_over_month(ref, TransactionType.EXPENSE)

    print(f"{ref.year}年{ref.month}月")
    print(f"收入: {format_currency(income)}")
    print(f"支出: {format_currency(expense)}")
    print(f"结余: {format_signed(income - expense)}")
    if delta.change_pct is None:
        print("支出环比: -")
    else:
        print(f"支出环比: {delta.change_pct:+}%")
    print(f"总余额: {format_signed(store.balance)}")

    insights = store.category_insights(ref, TransactionType.EXPENSE)
    if insights:
        print("支出分类:")
        for ins in insights:
            print(
                f"  {ins.category.name}  {format_currency(ins.amount)}  {ins.percentage}%"
            )


@app.command("report-trends")
def report_trends_cmd(
    ctx: typer.Context,
    *,
    tx_type: TransactionType = typer.Option(
        TransactionType.EXPENSE, "--type", case_sensitive=False, help="income or expense"
    ),
) -> None:
    """Totals by category by month as a text table."""

    from .api import trends_for

    store = _open_store(_database_url(ctx))
    table = trends_for(store, tx_type=tx_type)
    print(table if table else "No transactions to report.")


@app.command("voice")
def voice_cmd(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Transcript, e.g. '午饭花了30元'."),
    *,
    tx_type: TransactionType = typer.Option(
        TransactionType.EXPENSE,
        "--type",
        case_sensitive=False,
        help="Type to assume when the text has no income/expense keyword.",
    ),
    date: str | None = typer.Option(None, help="YYYY-MM-DD (defaults to today)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without confirmation."),
) -> None:
    """Parse a Chinese transcript and, after confirmation, record it."""

    from .api import parse_voice_input
    from .voice_parser import to_transaction

    parsed = parse_voice_input(text, tx_type)
    if parsed is None:
        _fail(f"could not understand an amount in '{text}'")
    store = _open_store(_database_url(ctx))
    tx = to_transaction(parsed, store.catalog, on=_parse_day(date))

    print(f"金额: {format_currency(tx.amount)}")
    print(f"类型: {tx.type.label}")
    print(f"分类: {tx.category.name}")
    print(f"描述: {tx.note}")
    if not yes and not typer.confirm("保存这条记录?", default=True):
        print("Cancelled.")
        return
    store.add_transaction(tx)
    _save(store)
    _logger.info("voice:saved id=%s category=%s", tx.id, tx.category.name)
    print(f"Added {_format_row(tx)}")


@app.command("categories")
def categories_cmd(
    ctx: typer.Context,
    *,
    tx_type: TransactionType | None = typer.Option(
        None, "--type", case_sensitive=False, help="Only categories of this type."
    ),
) -> None:
    """List predefined and custom categories."""

    store = _open_store(_database_url(ctx))
    cats = (
        store.all_categories()
        if tx_type is None
        else store.catalog.categories_for_type(tx_type)
    )
    for c in cats:
        marker = " (custom)" if c.is_custom else ""
        print(f"{c.icon} {c.name}\t{c.default_type.label}{marker}\t{c.id}")


@app.command("add-category")
def add_category_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Category name."),
    *,
    icon: str = typer.Option("", help="Emoji or short icon."),
    tx_type: TransactionType = typer.Option(
        TransactionType.EXPENSE, "--type", case_sensitive=False, help="Default type."
    ),
) -> None:
    """Create a custom category."""

    if not name.strip():
        _fail("category name must not be empty")
    store = _open_store(_database_url(ctx))
    cat = store.add_custom_category(name, icon, tx_type)
    _save(store)
    print(f"Added category {cat.name} ({cat.id})")


@app.command("delete-category")
def delete_category_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Custom category name or id."),
) -> None:
    """Delete a custom category; its transactions move to "未分类"."""

    store = _open_store(_database_url(ctx))
    cat = _find_category(store, name, prefer_custom=True)
    if not cat.is_custom:
        _fail(f"'{cat.name}' is a predefined category and cannot be deleted")
    moved = store.delete_category_and_reassign(cat)
    _save(store)
    print(f"Deleted category {cat.name}; {moved} transaction(s) moved to 未分类")


@app.command("seed")
def seed_cmd(ctx: typer.Context) -> None:
    """Add two months of sample transactions."""

    from .ingest.sample_data import sample_transactions

    store = _open_store(_database_url(ctx))
    rows = sample_transactions()
    for tx in rows:
        store.add_transaction(tx)
    _save(store)
    print(f"Seeded {len(rows)} transactions")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    ctx.obj = {"database_url": database_url}

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - manual entry point
    # Running as a module: `python -m finance_tracker.cli`
    app()
