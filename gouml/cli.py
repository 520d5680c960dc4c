"""Command line entry point: scan a Go source tree and write a PlantUML diagram."""

from __future__ import annotations

import argparse
import os
import sys
from typing import NoReturn, Optional, Sequence

from gouml.analysis import Config, analyze_code
from gouml.goparser import GoSyntaxError
from gouml.logkit import exported as log
from gouml.logkit.levels import Level

__all__ = ["main"]

_PROG = "gouml"


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad arguments."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog=_PROG,
        description="Draw a PlantUML class diagram of the structs and interfaces of Go code.",
    )
    parser.add_argument("--codedir", required=True, help="directory of the code to scan")
    parser.add_argument("--gopath", required=True, help="the GOPATH directory")
    parser.add_argument("--outputfile", required=True, help="file the diagram is saved to")
    parser.add_argument(
        "--ignoredir",
        action="append",
        default=[],
        help="directory to leave out of the scan; may be repeated",
    )
    return parser


def _example(prog: str) -> str:
    return (
        "Example:\n"
        f"{prog} --codedir /home/user/go/src/example.com/project "
        "--gopath /home/user/go --outputfile /tmp/result"
    )


def _config_from(opts: argparse.Namespace) -> Config:
    """Check the options and turn them into an analysis configuration."""
    code_dir: str = opts.codedir
    gopath_dir: str = opts.gopath
    if not code_dir:
        raise ValueError("the code directory must not be empty")
    if not gopath_dir:
        raise ValueError("the GOPATH directory must not be empty")
    if not code_dir.startswith(gopath_dir):
        raise ValueError(
            f"code directory {code_dir} must be a subdirectory of GOPATH directory {gopath_dir}"
        )
    for ignored in opts.ignoredir:
        if not ignored.startswith(code_dir):
            raise ValueError(
                f"ignored directory {ignored} must be a subdirectory of code directory {code_dir}"
            )
    return Config(
        code_dir=code_dir,
        gopath_dir=gopath_dir,
        vendor_dir=os.path.normpath(os.path.join(code_dir, "vendor")),
        ignore_dirs=list(opts.ignoredir),
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; returns the exit status or raises SystemExit on errors."""
    args = sys.argv[1:] if argv is None else list(argv)
    parser = _build_parser()
    if not args:
        print(_example(parser.prog))
        return 1

    opts = parser.parse_args(args)
    log.set_level(Level.INFO)

    try:
        config = _config_from(opts)
    except ValueError as exc:
        raise SystemExit(str(exc)) from None

    try:
        result = analyze_code(config)
    except (OSError, GoSyntaxError, UnicodeDecodeError) as exc:
        raise SystemExit(str(exc)) from None

    result.output_to_file(opts.outputfile)
    return 0


if __name__ == "__main__":
    sys.exit(main())