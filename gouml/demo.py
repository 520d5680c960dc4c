"""Example run: analyse a Go tree, save the diagram and print it."""

from __future__ import annotations

import argparse
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

from gouml.analysis import Config, analyze_code
from gouml.logkit import exported as log
from gouml.logkit.levels import Level

__all__ = ["run_demo", "main"]

PathLike = Union[str, "os.PathLike[str]"]


def run_demo(
    code_dir: PathLike,
    gopath_dir: PathLike,
    output_file: PathLike,
    ignore_vendor: bool = False,
) -> str:
    """Analyse ``code_dir``, write the diagram to ``output_file``, print and return it.

    With ``ignore_vendor`` the ``vendor`` directory of the code is used to resolve
    imports but is not itself drawn.
    """
    log.set_level(Level.INFO)
    code = os.fspath(code_dir)
    config = Config(code_dir=code, gopath_dir=os.fspath(gopath_dir))
    if ignore_vendor:
        config.vendor_dir = code + "/vendor"
        config.ignore_dirs = [code + "/vendor"]

    result = analyze_code(config)
    result.output_to_file(output_file)

    text = Path(output_file).read_text(encoding="utf-8")
    print(text)
    return text


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demo from the command line."""
    parser = argparse.ArgumentParser(prog="gouml-demo", description=run_demo.__doc__)
    parser.add_argument("code_dir", help="directory of the code to scan")
    parser.add_argument("gopath_dir", help="the GOPATH directory")
    parser.add_argument(
        "--output",
        default=os.path.join(tempfile.gettempdir(), "uml.txt"),
        help="file the diagram is saved to",
    )
    parser.add_argument(
        "--ignore-vendor",
        action="store_true",
        help="resolve imports through vendor/ but leave it out of the diagram",
    )
    opts = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    run_demo(opts.code_dir, opts.gopath_dir, opts.output, opts.ignore_vendor)
    return 0


if __name__ == "__main__":
    sys.exit(main())