"""Entry point for `python -m fanout_cli` and the `fanout` console script."""

from __future__ import annotations

from fanout_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
