"""Module wrapper so running ``python -m cargo_remote.cli`` matches the console script."""

from cargo_remote.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
