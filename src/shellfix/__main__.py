"""Module entrypoint for ``python -m shellfix``."""

from __future__ import annotations

from shellfix.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
