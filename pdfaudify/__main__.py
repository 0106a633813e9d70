"""Module entrypoint for running pdfaudify as ``python -m pdfaudify``."""

from __future__ import annotations

from pdfaudify.cli import main


if __name__ == "__main__":
    main()
