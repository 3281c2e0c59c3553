"""Command line entry points for the crack segmentation pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import DatasetConfig, ModelConfig, PipelineConfig, PreprocessingConfig
from .data import load_image
from .errors import SegmentationError
from .pipeline import CrackSegmentationPipeline, format_summary
from .visualization import save_rasters, save_visualization

app = typer.Typer(help="Segment cracks in photographs with an exported ONNX model.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)-28s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def run(
    image_root: Path = typer.Option(..., help="Directory containing crack images to process."),
    model_path: Path = typer.Option(..., help="Path to the exported ONNX segmentation model."),
    output_dir: Optional[Path] = typer.Option(None, help="Directory where result rasters will be written."),
    sample_limit: Optional[int] = typer.Option(None, help="Limit the number of samples processed."),
    visualize: bool = typer.Option(False, help="Persist a summary figure for each image."),
    seed: Optional[int] = typer.Option(None, help="Seed for the zero-pixel noise substitution."),
    threads: Optional[int] = typer.Option(None, help="ONNX Runtime intra-op threads (default: all cores)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Segment every image under IMAGE_ROOT."""

    _configure_logging(verbose)
    config = PipelineConfig(
        dataset=DatasetConfig(image_root=image_root),
        preprocessing=PreprocessingConfig(seed=seed),
        model=ModelConfig(model_path=model_path, intra_op_threads=threads),
        output_dir=output_dir,
        sample_limit=sample_limit,
        visualize=visualize,
    )
    try:
        CrackSegmentationPipeline(config).run()
    except SegmentationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def segment(
    image: Path = typer.Argument(..., help="Image to segment."),
    model_path: Path = typer.Option(..., help="Path to the exported ONNX segmentation model."),
    output_dir: Path = typer.Option(Path("."), help="Directory where result rasters will be written."),
    visualize: bool = typer.Option(False, help="Also write a summary figure."),
    seed: Optional[int] = typer.Option(None, help="Seed for the zero-pixel noise substitution."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Segment a single image and write its probability, mask and skeleton rasters."""

    _configure_logging(verbose)
    config = PipelineConfig(
        preprocessing=PreprocessingConfig(seed=seed),
        model=ModelConfig(model_path=model_path),
    )
    try:
        rgb = load_image(image)
        result = CrackSegmentationPipeline(config).segment(rgb)
    except SegmentationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    save_rasters(result, output_dir, image.stem)
    if visualize:
        save_visualization(rgb, result, output_dir / f"{image.stem}_summary.png", title=image.name)
    typer.echo(format_summary(image, result.summary))


def main() -> None:  # pragma: no cover - Typer handles invocation
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
