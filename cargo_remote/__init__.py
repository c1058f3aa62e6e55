"""
cargo_remote package initialisation.

The module performs two small tasks:

1. **Expose the version string**
   ``cargo_remote.__version__`` is resolved at import-time from the installed
   distribution metadata so that editable and regular installs report the
   same value.

2. **Re-export the public helpers**
   :func:`cargo_remote.config.load_config` and
   :func:`cargo_remote.patches.plan_patches` are re-exported at the top level
   so call-sites can simply do::

       from cargo_remote import load_config, plan_patches

Module attributes
-----------------
__version__ : str
    Semantic version derived from the installed wheel.
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    __version__: str = version("cargo-remote")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

# --------------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------------- #
from .config import load_config  # noqa: E402
from .patches import plan_patches  # noqa: E402

__all__: list[str] = ["load_config", "plan_patches", "__version__"]
