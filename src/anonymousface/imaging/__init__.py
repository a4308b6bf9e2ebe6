"""Imaging CLI: mask faces in local image files."""

import argparse


def main() -> None:
    """CLI entry point for offline masking."""
    parser = argparse.ArgumentParser(description="Mask every detected face in local images")
    parser.add_argument("inputs", nargs="+", help="Image files (JPEG, PNG, GIF, WEBP, BMP)")
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for *_masked.png files (default: next to each input)",
    )
    parser.add_argument("--mask", default=None, help="Mask PNG (default: packaged mask)")
    parser.add_argument(
        "--cascade", default=None, help="Cascade XML (default: OpenCV frontal face)"
    )
    args = parser.parse_args()

    _cmd_mask(args)


def _cmd_mask(args: argparse.Namespace) -> None:
    """Run the image pipeline over each input file."""
    from pathlib import Path

    from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

    from anonymousface import config
    from anonymousface.context import AppContext, default_cascade_params
    from anonymousface.detection.cascade import FaceCascade
    from anonymousface.errors import DecodeError
    from anonymousface.imaging.compositor import load_mask
    from anonymousface.pipeline import anonymize_bytes

    context = AppContext(
        cascade=FaceCascade(args.cascade or config.CASCADE_PATH),
        mask=load_mask(args.mask or config.MASK_PATH),
        secret="",
        cascade_params=default_cascade_params(),
    )

    output_dir = Path(args.output_dir) if args.output_dir else None
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    total_faces = 0
    failed: list[tuple[str, str]] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("{task.completed}/{task.total}"),
    ) as progress:
        task = progress.add_task("Masking faces", total=len(args.inputs))

        for name in args.inputs:
            path = Path(name)
            try:
                result = anonymize_bytes(path.read_bytes(), context)
            except (OSError, DecodeError) as exc:
                failed.append((name, str(exc)))
                progress.advance(task)
                continue

            target_dir = output_dir or path.parent
            (target_dir / f"{path.stem}_masked.png").write_bytes(result.data)
            total_faces += len(result.faces)
            progress.advance(task)

    print("\nDone.")
    print(f"  Images processed: {len(args.inputs) - len(failed)}")
    print(f"  Faces masked: {total_faces}")
    for name, reason in failed:
        print(f"  Skipped {name}: {reason}")
