"""
Generate the app icons from the master image.

Usage:
    python -m scripts.generate_icons [master] [output_dir]

Defaults to static/icon.png and writes icon-192.png and icon-512.png next
to it.
"""

import sys
from pathlib import Path

from PIL import Image


ICON_SIZES = (192, 512)
DEFAULT_MASTER = Path("static/icon.png")


def generate_icons(master: Path, output_dir: Path) -> list[Path]:
    """Write one square PNG per size. Returns the written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    with Image.open(master) as img:
        source = img.convert("RGBA")
        for size in ICON_SIZES:
            target = output_dir / f"icon-{size}.png"
            source.resize((size, size), Image.LANCZOS).save(target, format="PNG")
            written.append(target)

    return written


def main(argv: list[str]) -> int:
    master = Path(argv[0]) if argv else DEFAULT_MASTER
    output_dir = Path(argv[1]) if len(argv) > 1 else master.parent

    if not master.is_file():
        print(f"✗ Master image not found: {master}")
        return 1

    for path in generate_icons(master, output_dir):
        print(f"✓ {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
