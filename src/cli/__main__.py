"""Entry point for ``python -m cli`` running the Form Store CLI."""

from __future__ import annotations

from cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
