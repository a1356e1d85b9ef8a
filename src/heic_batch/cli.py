"""Command-line interface for the HEIC batch converter."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from heic_batch import __version__
from heic_batch.config import create_config
from heic_batch.logging_config import setup_logging
from heic_batch.models import BatchResults, ConversionStatus
from heic_batch.orchestrator import ConversionOrchestrator

# Create console for rich output
console = Console()


def convert_directory_with_progress(
    input_dir: Path, orchestrator: ConversionOrchestrator
) -> BatchResults:
    """Run a directory conversion behind a progress bar.

    Args:
        input_dir: Directory to convert
        orchestrator: Orchestrator instance to use for conversion

    Returns:
        BatchResults from the conversion
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]Converting HEIC files...", total=None)

        def progress_callback(current: int, total: int, filename: str) -> None:
            progress.update(
                task,
                total=total,
                completed=current,
                description=f"[cyan]Converted: {filename}",
            )

        orchestrator.progress_callback = progress_callback
        results = orchestrator.convert_directory(input_dir)

        progress.update(
            task,
            total=max(results.total_files, 1),
            completed=max(results.total_files, 1),
            description="[green]Conversion complete!",
        )

    return results


def display_summary(results: BatchResults) -> None:
    """Display a summary of the run.

    Args:
        results: BatchResults to display
    """
    table = Table(title="Conversion Summary", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Total Files", str(results.total_files))
    table.add_row("Successful", f"[green]{results.successful}[/green]")
    table.add_row("Failed", f"[red]{results.failed}[/red]")
    table.add_row("Originals Deleted", str(results.deleted))
    table.add_row("Success Rate", f"{results.success_rate():.1f}%")
    table.add_row("Total Time", f"{results.total_time:.2f}s")

    console.print()
    console.print(table)

    if results.failed > 0:
        console.print()
        console.print("[bold red]Failed Conversions:[/bold red]")
        for result in results.results:
            if result.status == ConversionStatus.FAILED:
                console.print(f"  [red]✗[/red] {result.input_path.name}: {result.error_message}")

    delete_failures = [r for r in results.results if r.delete_error]
    if delete_failures:
        console.print()
        console.print("[bold yellow]Originals Not Deleted:[/bold yellow]")
        for result in delete_failures:
            console.print(f"  [yellow]⊘[/yellow] {result.input_path.name}: {result.delete_error}")


def handle_error(error: Exception) -> None:
    """Display a formatted error message.

    Args:
        error: Exception to display
    """
    console.print(f"[bold red]Error:[/bold red] {error}", style="red")


@click.command()
@click.option(
    "--input_file",
    "--input-file",
    "input_file",
    default="",
    help="Path to a single .HEIC file to be converted.",
)
@click.option(
    "--input_dir",
    "--input-dir",
    "input_dir",
    default="",
    help="Path to a directory containing .HEIC files (searched recursively).",
)
@click.option(
    "--output_path",
    "--output-path",
    "output_path",
    default="",
    help="Path to the output file or directory. Default: next to each source.",
)
@click.option(
    "--delete",
    "delete_original",
    is_flag=True,
    default=False,
    help="Delete the original file after conversion.",
)
@click.option(
    "--format",
    "output_format",
    default="jpeg",
    show_default=True,
    help="Output image format (jpeg or png).",
)
@click.option(
    "--quality",
    "-q",
    type=click.IntRange(1, 100),
    default=80,
    show_default=True,
    help="Quality of the output image (1-100). Ignored for png.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of concurrent conversions. Default: number of CPUs.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append log output to this file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging.",
)
@click.option(
    "--version",
    is_flag=True,
    default=False,
    help="Show version information and exit.",
)
@click.help_option("--help", "-h")
def main(
    input_file: str,
    input_dir: str,
    output_path: str,
    delete_original: bool,
    output_format: str,
    quality: int,
    workers: int | None,
    log_file: Path | None,
    verbose: bool,
    version: bool,
) -> None:
    """Convert HEIC images to JPEG or PNG.

    Examples:

        # Convert a single file next to the source
        heic-batch --input_file photo.heic

        # Convert a directory tree to PNG, removing the originals
        heic-batch --input_dir ./photos --format png --delete

        # Write all results into one directory with custom quality
        heic-batch --input_dir ./photos --output_path ./converted --quality 95
    """
    if version:
        console.print(f"HEIC Batch Converter v{__version__}")
        sys.exit(0)

    if not input_file and not input_dir:
        console.print("Either --input_file or --input_dir must be specified.")
        sys.exit(1)

    try:
        logger = setup_logging(verbose=verbose, log_file=log_file)

        config = create_config(
            output_format=output_format,
            quality=quality,
            output_path=output_path,
            delete_original=delete_original,
            verbose=verbose,
            parallel_workers=workers,
        )
        orchestrator = ConversionOrchestrator(config, logger)
        console.print(f"Number of workers: {orchestrator.worker_count}")

        if verbose:
            console.print(f"[cyan]Format:[/cyan] {config.output_format}")
            console.print(f"[cyan]Quality:[/cyan] {config.quality}")
            console.print(
                f"[cyan]Output Path:[/cyan] "
                f"{config.output_path if config.output_path else 'Same as input'}"
            )
            console.print(f"[cyan]Delete Originals:[/cyan] {config.delete_original}")
            console.print()

        if input_file:
            if input_dir:
                logger.warning("Both --input_file and --input_dir given; using --input_file")
            results = orchestrator.convert_file(Path(input_file))
        else:
            results = convert_directory_with_progress(Path(input_dir), orchestrator)

    except Exception as e:
        handle_error(e)
        sys.exit(1)

    display_summary(results)
    console.print("All conversions completed.")

    # Exit with error code if any conversions failed
    if results.failed > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
