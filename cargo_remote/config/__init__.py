"""
Configuration package façade.

Exports the small, stable surface that external callers rely on:

* :func:`load_config` – Locate and merge the TOML config cascade into a
  :class:`RemoteConfig`.
* :func:`build_settings` – Overlay command-line values and produce the
  :class:`BuildSettings` passed to the build pipeline.
"""

from .loader import build_settings, load_config  # noqa: F401
from .schema import BuildSettings, RemoteConfig  # noqa: F401

__all__: list[str] = ["load_config", "build_settings", "BuildSettings", "RemoteConfig"]
