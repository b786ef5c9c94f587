"""Print the contents of a .vox file, and optionally a 2D view of one model.

    python -m voxreader chr_knight.vox --view XZ --flags swap-axis,invert-up,from-behind
"""

import argparse
import logging
import sys

from voxreader.errors import VoxError
from voxreader.projection import ViewFlags, Viewport
from voxreader.vox import VoxReader, format_scene, format_view

FLAG_NAMES = {
    "invert-up": ViewFlags.INVERT_UP,
    "from-behind": ViewFlags.FROM_BEHIND,
    "swap-axis": ViewFlags.SWAP_AXIS,
}


def parse_flags(text: str) -> ViewFlags:
    flags = ViewFlags.NONE
    for name in filter(None, (part.strip() for part in text.split(","))):
        if name not in FLAG_NAMES:
            raise argparse.ArgumentTypeError(
                f"unknown flag {name!r}; choose from {', '.join(FLAG_NAMES)}"
            )
        flags |= FLAG_NAMES[name]
    return flags


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="voxreader", description=__doc__.splitlines()[0])
    parser.add_argument("path", help=".vox file to read")
    parser.add_argument("--view", choices=[v.value for v in Viewport], help="print a 2D view")
    parser.add_argument("--flags", type=parse_flags, default=ViewFlags.NONE,
                        help="comma separated: " + ", ".join(FLAG_NAMES))
    parser.add_argument("--model", type=int, default=0, help="model index for --view")
    parser.add_argument("-v", "--verbose", action="store_true", help="log decoding steps")
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    reader = VoxReader()
    try:
        reader.load_file(args.path)
    except (OSError, VoxError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(format_scene(reader.scene))

    if args.view:
        try:
            view = reader.view2d(args.view, args.flags, args.model)
        except VoxError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        print()
        print(f"{args.view}-View:")
        print(format_view(view))

    return 0


if __name__ == "__main__":
    sys.exit(main())
