#!/usr/bin/env python3
"""
Notas Parser CLI
Extracts invoices and products from CSV exports and PDF invoices.
"""

import json
import logging
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .config import get_settings
from .engine import ExtractionEngine
from .exceptions import NotasParserError
from .models import ExtractionResult
from .store import JSONRecordStore, LocalFileStore
from .tokenizer import describe_delimiter, sniff as sniff_text

logger = logging.getLogger(__name__)

# Summaries go to stderr so stdout stays valid JSON
console = Console(stderr=True)


def setup_logging(level: str, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def render_summary(result: ExtractionResult) -> Table:
    """Build a rich table with one line per invoice."""
    table = Table(title=f"Invoices ({result.mode})")
    table.add_column("Supplier", style="cyan")
    table.add_column("CNPJ")
    table.add_column("Due date")
    table.add_column("Installment", justify="right")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Products", justify="right")

    counts = {}
    for product in result.products:
        counts[product.invoice_id] = counts.get(product.invoice_id, 0) + 1
    for invoice in result.invoices:
        table.add_row(
            invoice.supplier_name,
            invoice.tax_id or "-",
            invoice.due_date.strftime("%d/%m/%Y"),
            str(invoice.installment_index or "-"),
            f"R$ {invoice.total:,.2f}".replace(",", "X").replace(".", ",").replace("X", "."),
            str(counts.get(invoice.id, 0)),
        )
    return table


@click.group()
@click.version_option(package_name="notas-parser")
def cli():
    """Extract invoices and products from purchase documents."""


@cli.command()
@click.argument('locations', nargs=-1)
@click.option('--all', 'all_documents', is_flag=True, help='Process every .csv/.pdf under the base directory')
@click.option('--base-dir', type=click.Path(file_okay=False), help='Directory document locations are resolved against')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output JSON file path')
@click.option('--store', 'store_path', type=click.Path(dir_okay=False), help='Replace the records of this JSON record store')
@click.option('--save', is_flag=True, help='Replace the records of the configured record store')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def extract(locations: Tuple[str, ...], all_documents: bool, base_dir: Optional[str],
            output: Optional[str], store_path: Optional[str], save: bool, verbose: bool):
    """Extract invoices and products from LOCATIONS."""
    settings = get_settings()
    setup_logging(settings.log_level, verbose)

    file_store = LocalFileStore(base_dir or settings.uploads_dir)
    if save and not store_path:
        store_path = settings.record_store_path

    targets = list(locations)
    if all_documents:
        targets.extend(loc for loc in file_store.list_documents() if loc not in targets)

    try:
        engine = ExtractionEngine(store=file_store, settings=settings)
        result = engine.extract(targets)

        if result.invoices:
            console.print(render_summary(result))
        if result.mode != "local":
            console.print("[yellow]No data could be extracted; showing demo data.[/yellow]")

        payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(payload)
            console.print(f"[green]Results saved to: {output}[/green]")
        else:
            click.echo(payload)

        if store_path:
            counts = JSONRecordStore(store_path).replace(result)
            console.print(f"[green]Record store {store_path} updated: {counts}[/green]")
    except NotasParserError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def sniff(path: str, verbose: bool):
    """Show the detected delimiter and raw rows of a CSV file."""
    settings = get_settings()
    setup_logging(settings.log_level, verbose)

    try:
        text = LocalFileStore().read_text(path)
    except NotasParserError as e:
        raise click.ClickException(str(e))

    delimiter, rows = sniff_text(text)
    console.print(f"Delimiter: [bold]{describe_delimiter(delimiter)}[/bold], rows: {len(rows)}")
    click.echo(json.dumps({"delimiter": delimiter, "rows": rows}, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
