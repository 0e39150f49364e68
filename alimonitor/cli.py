"""
Interface de linha de comando (CLI) do Alimonitor.
Usa Typer para os comandos e Rich para a saída formatada.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config.logging_config import setup_logging
from config.settings import get_settings
from alimonitor.core.exceptions import (
    AlimonitorError,
    ExtractionExhaustedError,
    ValidationError,
)
from alimonitor.core.models import CapturedResponse, Product
from alimonitor.core.types import CurrencyCode
from alimonitor.pipeline import (
    ExtractionOrchestrator,
    PageSnapshot,
    ProductAssembler,
)
from alimonitor.scraper import ProductScraper

# Inicializa CLI
app = typer.Typer(
    name="alimonitor",
    help="Extração de dados normalizados de produtos do AliExpress.",
    add_completion=False,
)

# Console Rico para output formatado
console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Helper para executar corrotinas."""
    return asyncio.run(coro)


@app.command("scrape")
def scrape(
    product_id: str = typer.Argument(..., help="ID numérico do produto (ex: 1005006123456789)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Saída em formato JSON"),
    currency: Optional[str] = typer.Option(None, "--currency", "-c", help="Moeda de contexto (ex: BRL)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Espera pela API em segundos"),
):
    """
    Extrai um produto abrindo a página no navegador.

    Exemplos:
        alimonitor scrape 1005006123456789
        alimonitor scrape 1005006123456789 --json
        alimonitor scrape 1005006123456789 --currency USD --timeout 20
    """
    scraper = ProductScraper()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=err_console,
            transient=True,
        ) as progress:
            progress.add_task(f"Extraindo produto {product_id}...", total=None)

            product = run_async(
                scraper.scrape(
                    product_id,
                    default_currency=currency,
                    timeout=timeout,
                )
            )
    except AlimonitorError as e:
        _fail(e)

    _output(product, json_output)


@app.command("parse")
def parse(
    capture_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Arquivo JSON com respostas capturadas e HTML da página",
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Saída em formato JSON"),
    currency: Optional[str] = typer.Option(None, "--currency", "-c", help="Moeda de contexto (ex: BRL)"),
):
    """
    Reprocessa uma captura salva, sem navegador.

    Formato do arquivo:
        {"responses": [{"url": ..., "body": ...}], "html": ..., "scripts": [...], "global_state": {...}}

    Exemplos:
        alimonitor parse captura.json
        alimonitor parse captura.json --json --currency BRL
    """
    try:
        data = json.loads(capture_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        err_console.print(f"[red]✗ Arquivo de captura inválido: {e}[/red]")
        raise typer.Exit(code=2)

    try:
        default_currency = _parse_currency(currency)
        responses, snapshot = _load_capture(data)

        result = ExtractionOrchestrator().run(
            responses,
            snapshot,
            default_currency=default_currency,
        )
        product = ProductAssembler().assemble(result.draft, default_currency)
    except AlimonitorError as e:
        _fail(e)

    _output(product, json_output, stage=result.stage.value)


@app.command("version")
def version():
    """
    Exibe a versão do sistema.
    """
    from alimonitor import __version__

    console.print(f"[bold blue]Alimonitor[/bold blue] v{__version__}")
    console.print("Extração de dados normalizados de produtos do AliExpress")


# HELPERS

def _parse_currency(currency: Optional[str]) -> CurrencyCode:
    raw = currency or get_settings().default_currency
    parsed = CurrencyCode.parse(raw)
    if parsed is None:
        raise ValidationError("Moeda não suportada", field="currency", value=raw)
    return parsed


def _load_capture(data: Any) -> tuple[list[CapturedResponse], PageSnapshot]:
    """Converte o arquivo de captura em respostas e snapshot da página."""
    if not isinstance(data, dict):
        raise ValidationError("Arquivo de captura deve conter um objeto JSON", field="capture")

    responses = [
        CapturedResponse(url=item.get("url", ""), body=item.get("body", ""))
        for item in data.get("responses") or []
        if isinstance(item, dict)
    ]

    html = data.get("html")
    if html is None:
        snapshot = PageSnapshot(
            scripts=list(data.get("scripts") or []),
            global_state=data.get("global_state"),
        )
    else:
        snapshot = PageSnapshot.from_html(
            html,
            scripts=data.get("scripts"),
            global_state=data.get("global_state"),
        )

    return responses, snapshot


def _fail(error: AlimonitorError) -> None:
    """Exibe o erro e encerra com código de saída 1."""
    if isinstance(error, ExtractionExhaustedError):
        err_console.print(f"[red]✗ {error.message}[/red]")
    else:
        err_console.print(f"[red]✗ {error}[/red]")
    raise typer.Exit(code=1)


# FUNÇÕES DE DISPLAY

def _output(product: Product, json_output: bool, stage: Optional[str] = None) -> None:
    if json_output:
        typer.echo(json.dumps(product.to_response(), ensure_ascii=False, indent=2))
        return
    _display_product(product, stage)


def _format_price(price) -> str:
    if price is None:
        return "N/A"
    currency = price.currency.value if price.currency else ""
    return f"{currency} {price.value:.2f}".strip()


def _display_product(product: Product, stage: Optional[str] = None) -> None:
    """Exibe produto formatado."""
    console.print()
    console.print(Panel(
        f"[bold]{product.title or 'Sem título'}[/bold]\n\n"
        f"Preço: [bold green]{_format_price(product.sale_price)}[/bold green]\n"
        f"Original: [dim]{_format_price(product.original_price)}[/dim]\n"
        f"Moeda: [cyan]{product.currency_code.value}[/cyan]",
        title="🛒 Produto",
        subtitle=f"origem: {stage}" if stage else None,
        border_style="green" if product.has_discount else "blue",
    ))

    table = Table(title="Detalhes")
    table.add_column("Campo", style="cyan")
    table.add_column("Valor", style="white", overflow="fold")

    table.add_row("Avaliação", product.rating)
    table.add_row("Avaliações", str(product.total_reviews))
    table.add_row("Pedidos", product.orders)
    table.add_row("Loja", product.store_info.name or "N/A")
    table.add_row("Imagens", str(len(product.images)))

    console.print(table)

    for url in product.images[:5]:
        console.print(f"  • [link={url}]{url}[/link]")

    if len(product.images) > 5:
        console.print(f"[dim]... e mais {len(product.images) - 5} imagens[/dim]")


# ENTRY POINT

def main():
    """Entry point principal."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        log_path=settings.log_path,
        json_format=settings.log_json,
    )
    app()


if __name__ == "__main__":
    main()
