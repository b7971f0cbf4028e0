"""
CLI for ja-translate.

Provides commands for translating text or single files, batch translation
of markdown trees, and generating a default settings file.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from ja_translate.config import (
    BatchConfig,
    Settings,
    Tone,
    create_default_batch_config,
    create_default_config,
    load_batch_config,
    load_config,
)
from ja_translate.errors import TranslateError
from ja_translate.logging_setup import setup_logging
from ja_translate.translation.batch import BatchReport, BatchTranslator, FileStatus, localized_path
from ja_translate.translation.context import TranslatorContext
from ja_translate.translation.translator import (
    TranslationResult,
    TranslationStats,
    TranslationValidation,
)

app = typer.Typer(
    name="ja-translate",
    help="English to Japanese translation of developer content with glossary management.",
    add_completion=False,
)

console = Console()


def get_settings(settings_path: Path | None = None) -> Settings:
    """Load settings from a YAML file, the working directory, or defaults."""
    try:
        settings = load_config(settings_path)
    except TranslateError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    setup_logging(settings.logging)
    return settings


def _display_result(
    result: TranslationResult,
    stats: TranslationStats,
    validation: TranslationValidation,
) -> None:
    """Show a translation, its statistics and any validation issues."""
    console.print(
        Panel(
            Text(result.translated_text),
            title="[bold blue]Translation[/bold blue]",
            border_style="blue",
        )
    )

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column("Key", style="cyan")
    stats_table.add_column("Value", style="green")
    stats_table.add_row("Engine", result.engine)
    stats_table.add_row("Confidence", f"{result.confidence:.2f}")
    stats_table.add_row("Glossary terms", ", ".join(result.glossary_matches) or "-")
    stats_table.add_row("Words", f"{stats.original_word_count} -> {stats.translated_word_count}")
    stats_table.add_row("Expansion ratio", f"{stats.text_expansion_ratio:.2f}")
    stats_table.add_row("Time", f"{result.processing_time_ms:.1f}ms")
    console.print(stats_table)

    if validation.is_valid:
        return

    issues_table = Table(title="Validation Issues")
    issues_table.add_column("Type", style="magenta")
    issues_table.add_column("Severity", style="yellow")
    issues_table.add_column("Description")
    for issue in validation.issues:
        issues_table.add_row(issue.type, issue.severity, issue.description)
    console.print(issues_table)
    for suggestion in validation.suggestions:
        console.print(f"  [dim]- {suggestion}[/dim]")


def _display_report(report: BatchReport, report_path: Path | None) -> None:
    """Show a batch summary and the files that failed."""
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Key", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Total files", str(report.total_files))
    summary.add_row("Translated", f"[green]{report.success_count}[/green]")
    summary.add_row("Skipped", f"[yellow]{report.skipped_count}[/yellow]")
    summary.add_row("Failed", f"[red]{report.failure_count}[/red]")
    summary.add_row("Duration", f"{report.duration_ms / 1000:.1f}s")
    if report_path:
        summary.add_row("Report", str(report_path))
    console.print(Panel(summary, title="[bold]Batch Summary[/bold]", border_style="cyan"))

    failures = [r for r in report.results if r.status == FileStatus.FAILURE]
    if failures:
        table = Table(title="Failed Files")
        table.add_column("File", style="cyan")
        table.add_column("Error", style="red")
        for failure in failures:
            table.add_row(failure.source_file, failure.error or "")
        console.print(table)


@app.command()
def translate(
    text: str | None = typer.Argument(
        None, help="English text to translate, or the output path when --file is given"
    ),
    input_file: Path | None = typer.Option(None, "--file", "-f", help="Markdown file to translate"),
    output_file: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: input name with .ja before the suffix)"
    ),
    tone: Tone | None = typer.Option(None, "--tone", "-t", help="Target tone"),
    no_glossary: bool = typer.Option(False, "--no-glossary", help="Skip glossary substitution"),
    settings_path: Path | None = typer.Option(None, "--settings", "-s", help="Settings YAML file"),
) -> None:
    """Translate inline text or a single file."""
    if text is None and input_file is None:
        console.print("[red]Provide TEXT or --file[/red]")
        raise typer.Exit(1)

    settings = get_settings(settings_path)

    # `translate --file IN OUT`
    if input_file is not None and text is not None:
        output_file = output_file or Path(text)
        text = None

    updates: dict[str, object] = {}
    if tone is not None:
        updates["target_tone"] = tone
    if no_glossary:
        updates["use_glossary"] = False
    options = settings.translation.options.model_copy(update=updates)

    if input_file is not None and output_file is None:
        output_file = localized_path(input_file, settings.translation.locale)

    async def run_translation() -> tuple[
        TranslationResult, TranslationStats, TranslationValidation
    ]:
        async with TranslatorContext(settings) as ctx:
            translator = ctx.translator
            if input_file is not None:
                result = await translator.translate_file(input_file, output_file, options)
            else:
                result = await translator.translate(text, options)
            return result, translator.stats(result), translator.validate(result)

    try:
        result, stats, validation = asyncio.run(run_translation())
    except (TranslateError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    _display_result(result, stats, validation)
    if input_file is not None:
        console.print(f"[green]Saved translation to: {output_file}[/green]")


@app.command()
def batch(
    source: Path | None = typer.Option(None, "--source", help="Source directory"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    patterns: str | None = typer.Option(
        None, "--patterns", "-p", help="Comma-separated include globs (e.g. '*.md,*.mdx')"
    ),
    parallel: int | None = typer.Option(
        None, "--parallel", min=1, help="Files translated concurrently per chunk"
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite existing translations"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not back up overwritten files"),
    tone: Tone | None = typer.Option(None, "--tone", "-t", help="Target tone"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Batch config JSON file"),
    create_config: Path | None = typer.Option(
        None, "--create-config", help="Write a default batch config JSON file and exit"
    ),
    settings_path: Path | None = typer.Option(None, "--settings", "-s", help="Settings YAML file"),
) -> None:
    """Translate every matching file under a directory."""
    if create_config is not None:
        create_default_batch_config(create_config)
        console.print(f"[green]Created batch config: {create_config}[/green]")
        return

    settings = get_settings(settings_path)

    try:
        if config is not None:
            batch_config = load_batch_config(config)
        else:
            batch_config = BatchConfig(
                parallel_limit=settings.processing.parallel_limit,
                options=settings.translation.options,
            )
    except TranslateError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    # Command line flags override the config file
    updates: dict[str, object] = {}
    if source is not None:
        updates["source_dir"] = source
    if output is not None:
        updates["output_dir"] = output
    if patterns:
        updates["file_patterns"] = [p.strip() for p in patterns.split(",") if p.strip()]
    if parallel is not None:
        updates["parallel_limit"] = parallel
    if overwrite:
        updates["overwrite_existing"] = True
    if no_backup:
        updates["create_backup"] = False
    if tone is not None:
        updates["options"] = batch_config.options.model_copy(update={"target_tone": tone})
    batch_config = batch_config.model_copy(update=updates)

    console.print(
        f"[bold]Translating[/bold] {batch_config.source_dir} -> {batch_config.output_dir} "
        f"[dim](patterns: {', '.join(batch_config.file_patterns)}; "
        f"parallel: {batch_config.parallel_limit})[/dim]"
    )

    async def run_batch() -> tuple[BatchReport, Path | None]:
        async with TranslatorContext(settings) as ctx:
            with Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(complete_style="green", finished_style="green"),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=False,
            ) as progress:
                task = progress.add_task("[cyan]Translating files...", total=None)

                def on_progress(done: int, total: int) -> None:
                    progress.update(task, completed=done, total=total)

                batch_translator = BatchTranslator(
                    ctx.translator,
                    batch_config,
                    locale=settings.translation.locale,
                    progress_callback=on_progress,
                )
                report = await batch_translator.run()
                progress.update(task, description="[green]Complete!")

            report_path = None
            if batch_config.generate_report:
                report_path = batch_translator.write_report(report)
            return report, report_path

    try:
        report, report_path = asyncio.run(run_batch())
    except (TranslateError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    _display_report(report, report_path)

    if report.failed:
        raise typer.Exit(1)

    console.print("\n[bold green]Done![/bold green]")


@app.command()
def init(
    output_path: Path = typer.Option(
        Path("config.yaml"),
        "--output",
        "-o",
        help="Output path for settings file",
    ),
) -> None:
    """Generate a default settings file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created settings file: {output_path}[/green]")
    console.print("\nEdit the file (set OPENROUTER_API_KEY for the openrouter engine), then run:")
    console.print("  ja-translate batch --source ./content --output ./content/ja")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
