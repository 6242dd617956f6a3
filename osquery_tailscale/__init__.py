"""Package root for *osquery_tailscale*.

Exposes Tailscale devices, users and tags as osquery tables.  Run as an
autoloaded extension via the ``osquery-tailscale`` console script.
"""
from __future__ import annotations

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("osquery-tailscale")  # Works when installed via pip/poetry
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

__all__ = ["__version__"]
