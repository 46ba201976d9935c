"""
RRLabel CLI - Command-line interface for layout photograph labelling.

This module provides the command-line interface for RRLabel: creating
project archives from photographs, calibrating them against the physical
layout, placing labels and exporting the results.
"""

import sys
import uuid
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
import cv2

from .. import __version__, configure_logging
from ..analysis import label_counts, labels_to_dataframe
from ..core.archive import decode_image, load_project, read_image_size, save_project
from ..core.calibration import CalibrationEngine, estimate_layout_height
from ..core.config_spec import Settings, load_settings
from ..core.constants import CalibrationCorners, Defaults, FileNames, SCALE_RATIOS
from ..core.enums import MarkerCategory
from ..core.exceptions import CalibrationError, RRLabelError
from ..core.manifest_store import ManifestStore
from ..core.models import Layout, LayoutSize
from ..visualizers import draw_markers, rectify_image


def _fail(message: str) -> None:
    click.echo(f"❌ {message}", err=True)
    sys.exit(1)


def _open_project(ctx: click.Context, project_path: Path) -> Tuple[ManifestStore, Dict[str, bytes]]:
    settings: Settings = ctx.obj
    return load_project(
        project_path,
        default_marker_type=settings.default_marker_type,
        calibration_inset=settings.calibration_inset,
    )


def _check_image_index(store: ManifestStore, image_index: int) -> None:
    if store.document.image(image_index) is None:
        raise click.BadParameter(
            f"project has {len(store.document.images)} image(s)", param_hint="--image"
        )


@click.group()
@click.version_option(version=__version__, prog_name='RRLabel')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, path_type=Path),
              help='Settings YAML file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """RRLabel - Calibrate and label model railroad layout photographs.

    A project (.r49) bundles photographs with a manifest holding the layout
    description, a four-corner calibration rectangle and typed labels.

    \b
    Common Commands:
      rrlabel new photo.jpg -o layout.r49 --width 2400   - Create a project
      rrlabel info layout.r49                            - Show project summary
      rrlabel calibrate layout.r49 --corner rect-0 120 95
      rrlabel label layout.r49 640 410 --type train      - Place a label
      rrlabel export layout.r49 -o labels.csv            - Export labels
      rrlabel rectify layout.r49 -o top.png              - Top-down view

    Use 'rrlabel COMMAND --help' for more information on each command.
    """
    try:
        settings = load_settings(config_path)
    except RRLabelError as e:
        _fail(f"Invalid settings: {e}")
    configure_logging('debug' if verbose else settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument('image_paths', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(dir_okay=False, path_type=Path),
              help='Project archive to create')
@click.option('--name', help='Layout name')
@click.option('--scale', type=click.Choice(sorted(SCALE_RATIOS), case_sensitive=False),
              default=Defaults.SCALE, show_default=True, help='Model scale')
@click.option('--width', type=float, help='Layout width in mm')
@click.option('--height', type=float, help='Layout height in mm (estimated from the photo if omitted)')
@click.pass_context
def new(ctx: click.Context, image_paths: Tuple[Path, ...], output_path: Path, name: Optional[str],
        scale: str, width: Optional[float], height: Optional[float]):
    """Create a project from one or more photographs.

    The first photograph sets the camera resolution and seeds the
    calibration rectangle.

    \b
    Examples:
      rrlabel new layout.jpg -o layout.r49 --name "Station" --width 2400
      rrlabel new a.jpg b.jpg -o layout.r49 --scale N
    """
    settings: Settings = ctx.obj
    try:
        images: Dict[str, bytes] = {}
        for image_path in image_paths:
            if image_path.name in images:
                raise click.BadParameter(f"duplicate file name {image_path.name}", param_hint='IMAGE_PATHS')
            images[image_path.name] = image_path.read_bytes()

        first = image_paths[0].name
        image_width, image_height = read_image_size(images[first])

        store = ManifestStore(
            default_marker_type=settings.default_marker_type,
            calibration_inset=settings.calibration_inset,
        )
        store.set_image_dimensions(image_width, image_height)
        for filename in images:
            store.add_image(filename)

        if width and not height:
            height = estimate_layout_height(width, store.document.camera.resolution)
        store.set_layout(Layout(name=name, scale=scale.upper(), size=LayoutSize(width, height)))

        path = save_project(output_path, store, images)
    except RRLabelError as e:
        _fail(f"Could not create project: {e}")

    click.echo(f"✅ Created {path} ({len(images)} image(s), {image_width}x{image_height})")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def info(ctx: click.Context, project_path: Path):
    """Show layout, calibration and label summary of a project."""
    try:
        store, _ = _open_project(ctx, project_path)
    except RRLabelError as e:
        _fail(f"Could not open project: {e}")

    document = store.document
    layout = document.layout
    resolution = document.camera.resolution

    click.echo(f"📋 Project: {project_path}")
    click.echo(f"   Layout: {layout.name or '(unnamed)'}")
    click.echo(f"   Scale: {layout.scale} (1:{layout.ratio or '?'})")
    click.echo(f"   Size: {layout.size.width or '?'} x {layout.size.height or '?'} mm")
    click.echo(f"   Resolution: {resolution.width}x{resolution.height}")

    click.echo("   Calibration:")
    for corner in CalibrationCorners.ALL:
        point = document.calibration.get(corner)
        position = f"({point.x:g}, {point.y:g})" if point else "missing"
        click.echo(f"     {corner}: {position}")

    dots = CalibrationEngine.dots_per_track(document)
    click.echo(f"   Dots per track: {dots if dots >= 0 else 'unavailable'}")

    click.echo(f"   Images: {len(document.images)}")
    for index, image in enumerate(document.images):
        click.echo(f"     [{index}] {image.filename}: {len(image.labels)} label(s)")

    counts = label_counts(document)
    if counts:
        summary = ", ".join(f"{marker_type}={count}" for marker_type, count in counts.items())
        click.echo(f"   Labels by type: {summary}")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--corner', 'corners', multiple=True,
              type=(click.Choice(CalibrationCorners.ALL), float, float),
              help='Corner id and its pixel position, e.g. --corner rect-0 120 95')
@click.option('--width', type=float, help='Layout width in mm')
@click.option('--height', type=float, help='Layout height in mm')
@click.pass_context
def calibrate(ctx: click.Context, project_path: Path, corners, width: Optional[float], height: Optional[float]):
    """Move calibration corners and set the physical layout size.

    \b
    Corners:
      rect-0 top-left      rect-2 top-right
      rect-1 bottom-left   rect-3 bottom-right
    """
    if not corners and width is None and height is None:
        raise click.UsageError("Nothing to change: pass --corner, --width or --height")

    try:
        store, images = _open_project(ctx, project_path)
        for corner, x, y in corners:
            store.set_marker(MarkerCategory.CALIBRATION, corner, x, y)

        if width is not None or height is not None:
            layout = store.document.layout
            size = LayoutSize(
                width if width is not None else layout.size.width,
                height if height is not None else layout.size.height,
            )
            store.set_layout(Layout(
                name=layout.name, scale=layout.scale, size=size,
                description=layout.description, contact=layout.contact,
                gauge_mm=layout.gauge_mm, scale_ratio=layout.scale_ratio,
            ))

        save_project(project_path, store, images)
    except RRLabelError as e:
        _fail(f"Calibration failed: {e}")

    document = store.document
    try:
        CalibrationEngine.perspective_transform(document)
        click.echo("✅ Calibration is complete")
    except CalibrationError as e:
        click.echo(f"⚠️  Calibration not usable yet: {e}")
    dots = CalibrationEngine.dots_per_track(document)
    click.echo(f"   Dots per track: {dots if dots >= 0 else 'unavailable'}")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('x', type=float)
@click.argument('y', type=float)
@click.option('--type', '-t', 'marker_type', help='Marker type (default from settings)')
@click.option('--image', '-i', 'image_index', type=int, default=0, show_default=True, help='Image index')
@click.pass_context
def label(ctx: click.Context, project_path: Path, x: float, y: float, marker_type: Optional[str], image_index: int):
    """Place a label at pixel position X Y."""
    try:
        store, images = _open_project(ctx, project_path)
        _check_image_index(store, image_index)
        marker_id = uuid.uuid4().hex
        store.set_marker(MarkerCategory.LABEL, marker_id, x, y, marker_type, image_index)
        save_project(project_path, store, images)
    except RRLabelError as e:
        _fail(f"Could not add label: {e}")

    marker = store.document.image(image_index).labels[marker_id]
    click.echo(f"✅ Added {marker.type} label {marker_id} at ({marker.x}, {marker.y})")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('marker_id')
@click.option('--image', '-i', 'image_index', type=int, default=0, show_default=True, help='Image index')
@click.pass_context
def unlabel(ctx: click.Context, project_path: Path, marker_id: str, image_index: int):
    """Remove the label MARKER_ID."""
    try:
        store, images = _open_project(ctx, project_path)
        _check_image_index(store, image_index)
        if marker_id not in store.document.image(image_index).labels:
            _fail(f"No label {marker_id} on image {image_index}")
        store.delete_marker(MarkerCategory.LABEL, marker_id, image_index)
        save_project(project_path, store, images)
    except RRLabelError as e:
        _fail(f"Could not remove label: {e}")

    click.echo(f"✅ Removed label {marker_id}")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(dir_okay=False, path_type=Path),
              help='CSV file to write')
@click.pass_context
def export(ctx: click.Context, project_path: Path, output_path: Path):
    """Export all labels to CSV, with mm coordinates when calibrated."""
    try:
        store, _ = _open_project(ctx, project_path)
    except RRLabelError as e:
        _fail(f"Could not open project: {e}")

    try:
        transform = CalibrationEngine.perspective_transform(store.document)
    except CalibrationError as e:
        click.echo(f"⚠️  Exporting pixel coordinates only: {e}")
        transform = None

    df = labels_to_dataframe(store.document, transform)
    df.to_csv(output_path, index=False)
    click.echo(f"✅ Exported {len(df)} label(s) to {output_path}")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(dir_okay=False, path_type=Path),
              help='Image file to write')
@click.option('--image', '-i', 'image_index', type=int, default=0, show_default=True, help='Image index')
@click.option('--px-per-mm', type=float, default=Defaults.PX_PER_MM, show_default=True, help='Output resolution')
@click.option('--full-frame', is_flag=True, help='Render the whole photograph instead of the layout area')
@click.option('--draw', is_flag=True, help='Draw calibration and labels before rectifying')
@click.pass_context
def rectify(ctx: click.Context, project_path: Path, output_path: Path, image_index: int,
            px_per_mm: float, full_frame: bool, draw: bool):
    """Write a perspective-corrected, top-down view of a photograph."""
    try:
        store, images = _open_project(ctx, project_path)
        _check_image_index(store, image_index)
        document = store.document
        filename = document.image(image_index).filename
        if filename not in images:
            _fail(f"Image {filename} is not in the project archive")

        transform = CalibrationEngine.perspective_transform(document)
        image = decode_image(images[filename])
        if draw:
            image = draw_markers(image, document, image_index)

        bounds = None
        if not full_frame:
            bounds = (0.0, 0.0, document.layout.size.width, document.layout.size.height)
        rectified = rectify_image(image, transform, px_per_mm, bounds)
    except (RRLabelError, ValueError) as e:
        _fail(f"Could not rectify image: {e}")

    if not cv2.imwrite(str(output_path), rectified):
        _fail(f"Could not write {output_path}")
    height, width = rectified.shape[:2]
    click.echo(f"✅ Wrote {output_path} ({width}x{height})")


@cli.command()
@click.argument('project_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def validate(ctx: click.Context, project_path: Path):
    """Validate a project archive.

    \b
    Validation checks:
      ✓ Archive structure and manifest version
      ✓ Manifest schema
      ✓ Images listed in the manifest are present
      ✓ Calibration is complete and non-degenerate
      ✓ Labels lie inside their image
    """
    click.echo(f"🔍 Validating project: {project_path}")
    try:
        store, images = _open_project(ctx, project_path)
    except RRLabelError as e:
        _fail(f"Validation failed: {e}")

    document = store.document
    issues = []
    warnings = []

    for image in document.images:
        if image.filename not in images:
            issues.append(f"Image missing from archive: {image.filename}")

    try:
        CalibrationEngine.perspective_transform(document)
    except CalibrationError as e:
        warnings.append(f"Calibration: {e}")

    resolution = document.camera.resolution
    if resolution.width and resolution.height:
        for index, image in enumerate(document.images):
            for marker_id, marker in image.labels.items():
                if not (0 <= marker.x <= resolution.width and 0 <= marker.y <= resolution.height):
                    warnings.append(f"Label {marker_id} on image {index} lies outside the image")

    click.echo()
    if issues:
        click.echo("❌ Project validation failed:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo(f"✅ Project is valid! ({FileNames.MANIFEST_JSON} version {document.version})")

    if warnings:
        click.echo("⚠️  Warnings:")
        for warning in warnings:
            click.echo(f"   • {warning}")

    if issues:
        sys.exit(1)


def main():
    """Main entry point for the RRLabel CLI."""
    cli()


if __name__ == '__main__':
    main()
