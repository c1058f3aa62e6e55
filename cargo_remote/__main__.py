"""
Module entry-point that makes the package runnable with

    python -m cargo_remote remote build --release

The behaviour is identical to the *cargo-remote* console script because the
Click **group** object imported below performs all CLI dispatching.
"""

from cargo_remote.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
