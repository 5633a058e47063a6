"""Entrypoint to launch the Continuum command line."""
from continuum.cli import main as cli_main


def main() -> None:
    raise SystemExit(cli_main())


if __name__ == "__main__":
    main()
