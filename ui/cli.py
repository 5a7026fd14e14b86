from __future__ import annotations

from raspi_writer.main import main as core_main


def main(argv: list[str] | None = None) -> int:
    # Kept as a thin wrapper so packaging scripts and `python -m ui.cli` share one entrypoint.
    return core_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
