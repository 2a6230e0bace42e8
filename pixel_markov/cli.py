"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from pixel_markov.config import MarkovConfig
from pixel_markov.errors import ModelNotReadyError, ValidationError
from pixel_markov.image_io import load_samples, make_comparison_grid, save_palette, save_upscaled
from pixel_markov.markov import load_model, save_model
from pixel_markov.pipeline import synthesize, train, validate_positive_int

app = typer.Typer(
    name="pixel-markov",
    help="Learn colour transitions from sample images and synthesise new ones.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


# Defaults come from MarkovConfig - single source of truth
_DEFAULTS = MarkovConfig()


# -- train command -----------------------------------------------------

@app.command("train")
def train_cmd(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with sample images",
    ),
    model_path: Path = typer.Option(
        Path("output/model.json"), "--model", help="Where to write the model",
    ),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W", help="Sample width"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H", help="Sample height"),
    colors: int = typer.Option(
        _DEFAULTS.color_count, "--colors", "-k", help="Palette size",
    ),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", "-s", help="Random seed (None = random)",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Palette swatch upscale",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Learn a palette and transition model from INPUT_DIR."""
    _setup_logging(verbose)

    images = _collect_images(input_dir, _DEFAULTS.SUPPORTED_EXTENSIONS)
    try:
        validate_positive_int("width", width)
        validate_positive_int("height", height)
        result = train(load_samples(images, width, height), colors, rng=seed)
    except ValidationError as exc:
        _fail(str(exc))

    model_path.parent.mkdir(parents=True, exist_ok=True)
    save_model(model_path, result.model, result.palette)
    save_palette(
        result.palette,
        model_path.with_name(f"{model_path.stem}_palette.{_DEFAULTS.output_format}"),
        upscale,
    )
    console.print(
        f"[green]✓[/green] Model saved to {model_path}  "
        f"[dim]{len(images)} image(s)  {len(result.palette)} colours  "
        f"{len(result.model)} sources[/dim]"
    )


# -- generate command --------------------------------------------------

@app.command("generate")
def generate_cmd(
    model_path: Path = typer.Argument(..., help="Model JSON written by 'train'"),
    output: Path = typer.Option(Path("output/generated.png"), "--output", "-o"),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    upscale: int = typer.Option(_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Generate one image from a saved model."""
    _setup_logging(verbose)

    model = load_model(model_path)[0] if model_path.exists() else None
    try:
        image = synthesize(model, width, height, rng=seed)
    except (ValidationError, ModelNotReadyError) as exc:
        _fail(str(exc))

    output.parent.mkdir(parents=True, exist_ok=True)
    save_upscaled(image, output, upscale)
    console.print(f"[green]✓[/green] Saved to {output}  [dim]{width}x{height}[/dim]")


# -- run command -------------------------------------------------------

@app.command()
def run(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with sample images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H"),
    colors: int = typer.Option(_DEFAULTS.color_count, "--colors", "-k"),
    count: int = typer.Option(1, "--count", "-n", help="Images to generate"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    upscale: int = typer.Option(_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Train on INPUT_DIR and write generated images to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("pixel_markov")

    cfg = MarkovConfig(
        width=width,
        height=height,
        color_count=colors,
        seed=seed,
        pixel_upscale=upscale,
        input_dir=input_dir,
        output_dir=output_dir,
    )

    input_dir.mkdir(exist_ok=True)
    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]PIXEL MARKOV[/bold]\n"
        f"Size: {cfg.width}x{cfg.height}  |  Colours: {cfg.color_count}\n"
        f"Seed: {cfg.seed}  |  Samples: {len(images)}",
        border_style="cyan",
    ))

    t_total = time.perf_counter()
    rng = np.random.default_rng(cfg.seed)
    try:
        validate_positive_int("width", cfg.width)
        validate_positive_int("height", cfg.height)
        samples = load_samples(images, cfg.width, cfg.height)
        result = train(
            samples, cfg.color_count, rng=rng,
            max_iterations=cfg.max_iterations, tolerance=cfg.tolerance,
        )
    except ValidationError as exc:
        _fail(str(exc))
    if result.model.is_empty:
        _fail(
            f"No neighbouring pixels to learn from at {cfg.width}x{cfg.height}; "
            "increase --width / --height"
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    if cfg.save_model:
        save_model(output_dir / "model.json", result.model, result.palette)
    if cfg.save_palette:
        save_palette(
            result.palette, output_dir / f"palette.{cfg.output_format}", cfg.pixel_upscale,
        )

    for idx in range(1, count + 1):
        image = synthesize(result.model, cfg.width, cfg.height, rng=rng)
        out_path = output_dir / f"generated_{idx:03d}.{cfg.output_format}"
        save_upscaled(image, out_path, cfg.pixel_upscale)
        logger.info("Saved %s", out_path.name)

        if cfg.save_comparison and idx == 1:
            make_comparison_grid(
                samples, result.palette, image,
                output_dir / f"comparison.{cfg.output_format}", cfg.pixel_upscale,
            )

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - {count} image(s) in [bold]{output_dir}/[/bold]"
        f"  [dim]time={time.perf_counter() - t_total:.1f}s[/dim]",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
