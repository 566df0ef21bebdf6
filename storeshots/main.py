"""Entry point for running the storeshots pipeline as a module."""

from __future__ import annotations

import logging
import sys


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


if __name__ == "__main__":
    from .cli import main

    sys.exit(main())
