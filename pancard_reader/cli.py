"""Command-line interface for the PAN card reader."""

import asyncio
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .capture.camera import camera_device
from .capture.source import CaptureSourceManager
from .core.types import PipelineState, RunOutcome
from .ocr.regexes import is_valid_pan_number
from .pipeline.controller import PipelineController
from .utils.log import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

console = Console()

app = typer.Typer(
    name="pancard-reader",
    help="PAN Card Reader - read PAN numbers from card images or a live camera",
    add_completion=False
)

PREVIEW_WINDOW = "PAN Card Reader - SPACE to capture, ESC to exit"
CAPTURED_WINDOW = "PAN Card Reader - captured image"
KEY_ESC = 27
KEY_SPACE = 32


def render_results(state: PipelineState):
    """Print accumulated PAN numbers and the current error, if any."""
    if state.results:
        table = Table(title="PAN Card Numbers")
        table.add_column("#", style="dim", justify="right")
        table.add_column("PAN Number", style="bold cyan")
        for index, pan_number in enumerate(state.results, start=1):
            table.add_row(str(index), pan_number)
        console.print(table)

    if state.error_message:
        console.print(f"[red]❌ {state.error_message}[/red]")


def _outcome_line(outcome: RunOutcome, state: PipelineState) -> Optional[str]:
    if outcome == RunOutcome.FOUND:
        return f"[green]✓ Found PAN number {state.results[-1]}[/green]"
    if outcome == RunOutcome.BUSY:
        return "[yellow]⚠ A card is still being read[/yellow]"
    if outcome == RunOutcome.CANCELLED:
        return "[dim]No image chosen[/dim]"
    return None


async def _run_with_spinner(controller: PipelineController, trigger, description: str) -> RunOutcome:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task(description, total=None)
        controller.progress = lambda step: progress.update(task, description=f"{description} ({step})")
        try:
            return await trigger()
        finally:
            controller.progress = None


async def _copy_latest(controller: PipelineController):
    if controller.results:
        await controller.copy_identifier(controller.results[-1])
    else:
        console.print("[yellow]⚠ Nothing to copy[/yellow]")


async def _read_images(images: List[Path], copy: bool) -> int:
    found = 0
    async with PipelineController(capture=CaptureSourceManager(camera=None)) as controller:
        for image_path in images:
            console.print(f"\n[bold]Reading {escape(str(image_path))}[/bold]")
            outcome = await _run_with_spinner(
                controller,
                lambda: controller.accept_upload(image_path),
                "Reading PAN card...",
            )
            line = _outcome_line(outcome, controller.state)
            if line:
                console.print(line)
            elif controller.error_message:
                console.print(f"[red]❌ {controller.error_message}[/red]")
            if outcome == RunOutcome.FOUND:
                found += 1
                controller.notifier.beep()

        console.print()
        render_results(controller.state)

        if copy:
            await _copy_latest(controller)
    return found


@app.command()
def read(
    images: List[Path] = typer.Argument(..., help="Card image files to read"),
    copy: bool = typer.Option(False, "--copy", "-c", help="Copy the last PAN number to the clipboard"),
):
    """Read PAN numbers from uploaded card images, accumulating the results."""

    console.print(Panel.fit(
        "[bold blue]PAN Card Reader[/bold blue]\n"
        "[dim]Upload → OCR → PAN number[/dim]",
        border_style="blue"
    ))

    try:
        found = asyncio.run(_read_images(images, copy))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Reading interrupted by user[/yellow]")
        raise typer.Exit(130)

    if found == 0:
        raise typer.Exit(1)


async def _preview_until_key(controller: PipelineController) -> int:
    """Show live frames until SPACE or ESC; returns the key pressed."""
    while True:
        session = controller.capture.session
        frame = session.read_frame() if session is not None else None
        if frame is None:
            await asyncio.sleep(0.05)
            if controller.capture.session is None:
                return KEY_ESC
            continue

        overlay = frame.copy()
        cv2.putText(overlay, "SPACE to capture | ESC to exit", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        cv2.imshow(PREVIEW_WINDOW, overlay)

        key = cv2.waitKey(1) & 0xFF
        if key in (KEY_ESC, KEY_SPACE):
            return key
        await asyncio.sleep(0)


async def _scan(copy: bool):
    async with PipelineController(capture=CaptureSourceManager(camera=camera_device)) as controller:
        try:
            while True:
                with console.status("[bold green]Opening camera...", spinner="dots"):
                    opened = await controller.open_camera()
                if not opened:
                    render_results(controller.state)
                    raise typer.Exit(1)
                console.print("[green]✓ Camera live[/green]")

                key = await _preview_until_key(controller)
                cv2.destroyAllWindows()
                if key == KEY_ESC:
                    controller.close_camera()
                    break

                outcome = await _run_with_spinner(controller, controller.capture_frame, "Reading PAN card...")
                image = controller.current_image
                if image is not None and isinstance(image.data, np.ndarray):
                    cv2.imshow(CAPTURED_WINDOW, image.data)
                    cv2.waitKey(1)

                line = _outcome_line(outcome, controller.state)
                if line:
                    console.print(line)
                render_results(controller.state)

                if outcome == RunOutcome.FOUND:
                    controller.notifier.beep()
                    if copy:
                        await _copy_latest(controller)

                if not typer.confirm("Remove this image and scan another card?", default=False):
                    break
                controller.remove_image()
                cv2.destroyAllWindows()
        finally:
            cv2.destroyAllWindows()


@app.command()
def scan(
    copy: bool = typer.Option(False, "--copy", "-c", help="Copy each PAN number to the clipboard"),
):
    """Capture a PAN card from the live camera and read its number."""

    console.print(Panel.fit(
        "[bold blue]PAN Card Reader[/bold blue]\n"
        "[dim]Camera → OCR → PAN number[/dim]",
        border_style="blue"
    ))

    try:
        asyncio.run(_scan(copy))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Scanning interrupted by user[/yellow]")
    finally:
        console.print("\n[green]✓ Camera released[/green]")


@app.command()
def copy(
    pan_number: str = typer.Argument(..., help="PAN number to copy"),
):
    """Copy a PAN number to the clipboard."""
    if not is_valid_pan_number(pan_number):
        console.print(f"[red]❌ Not a PAN number: {pan_number}[/red]")
        raise typer.Exit(2)

    controller = PipelineController(capture=CaptureSourceManager(camera=None))
    if not asyncio.run(controller.copy_identifier(pan_number)):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
