#!/usr/bin/env python3
"""latticectl CLI entrypoint.

A thin shell that parses arguments, configures logging and hands off to
`dispatch`.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Final, List, Optional

from rich.console import Console

from ..utils.logging_setup import setup_logging
from .dispatch import dispatch
from .parser import create_parser

__all__: Final = ["main"]


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=args.debug, quiet=args.quiet, log_file=args.log_file)
    console = Console()
    try:
        rc = asyncio.run(dispatch(console, args))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        rc = 130
    sys.exit(int(rc))
