"""High-level workflows built on the patch pipeline and the engines."""

from .remote_build import prepare_plan, run_remote_build

__all__ = ["prepare_plan", "run_remote_build"]
