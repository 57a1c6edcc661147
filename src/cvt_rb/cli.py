# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""
Command-line front end: compute and print CVT-RB timings, e.g.

    $ cvt-rb 1920 1080 60 --rb-version v3 --format modeline
"""

import argparse
import enum
import logging
import sys

from .calc       import compute
from .constants  import CONSTANTS
from .errors     import CVTError
from .modeline   import DVIModeline
from .params     import CVTParameters
from .types      import RBVersion

class OutputFormat(str, enum.Enum):
    Table    = "table"
    Modeline = "modeline"
    All      = "all"

def build_parser():
    parser = argparse.ArgumentParser(
        prog="cvt-rb",
        description="Calculate CVT Reduced Blanking (v2/v3) video timings.")

    parser.add_argument("h_pixels", type=int,
                        help="Active horizontal pixels per line.")
    parser.add_argument("v_lines", type=int,
                        help="Active vertical lines per frame.")
    parser.add_argument("refresh_hz", type=float,
                        help="Target vertical refresh rate (Hz).")
    parser.add_argument("--rb-version",
                        type=RBVersion,
                        default=RBVersion.default().value,
                        choices=[v.value for v in RBVersion.all()],
                        help=f"Reduced blanking formula version (default={RBVersion.default().value}).")
    parser.add_argument("--video-opt", action="store_true",
                        help="v2: apply the 1000/1001 'video-optimized' refresh factor.")
    parser.add_argument("--additional-hblank", type=int, default=None,
                        help="v3: extra HBlank pixels, 0 or a multiple of 8 between 8 and 120.")
    parser.add_argument("--vblank", type=float, default=None,
                        help="Desired VBlank time in usec (460 or greater).")
    parser.add_argument("--early-vsync", action="store_true",
                        help="v3: place VSync near the middle of VBlank.")
    parser.add_argument("--name", type=str, default=None,
                        help="Modeline name (default: <width>x<height>R).")
    parser.add_argument("--format",
                        type=OutputFormat,
                        default=OutputFormat.Table.value,
                        choices=[f.value for f in OutputFormat],
                        help="What to print (default=table).")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging.")
    return parser

def params_from_args(args):
    params = CVTParameters(
        rb_version=args.rb_version.number,
        h_pixels=args.h_pixels,
        v_lines=args.v_lines,
        refresh_hz=args.refresh_hz,
        video_opt=args.video_opt,
        early_vsync=args.early_vsync,
    )
    # Leave unset so the version default applies.
    if args.additional_hblank is not None:
        params.additional_hblank = args.additional_hblank
    if args.vblank is not None:
        params.vblank_us = args.vblank
    return params

def dump(title, values):
    print(f"{title}:")
    for key, value in values.items():
        print(f"  {key:<22} {value}")

def main(argv=None):
    parser = build_parser()

    # Print help if no arguments are passed.
    argv = sys.argv[1:] if argv is None else argv
    args = parser.parse_args(argv if argv else ["--help"])

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        params = params_from_args(args)
        timing = compute(args.rb_version, params)
    except CVTError as e:
        parser.error(str(e))

    modeline = DVIModeline.from_timing(timing)

    if args.format == OutputFormat.Table:
        print(timing.prettyprint())
    elif args.format == OutputFormat.Modeline:
        print(modeline.xrandr(args.name))
    else:
        dump("inputs", params.resolve(args.rb_version))
        dump(f"constants ({args.rb_version.value})", CONSTANTS[args.rb_version].as_dict())
        dump("timing", timing.as_dict())
        print(modeline.xrandr(args.name))

    return 0

if __name__ == "__main__":
    sys.exit(main())
