"""Module entrypoint for running bookmerge as ``python -m bookmerge``."""

from __future__ import annotations

from bookmerge.cli import main


if __name__ == "__main__":
    main()
