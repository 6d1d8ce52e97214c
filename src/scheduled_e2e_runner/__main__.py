"""Module entry point for `python -m scheduled_e2e_runner`."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
