"""Installed exprlang version."""

from importlib.metadata import PackageNotFoundError, version

_DIST_NAME = "exprlang"


def get_version() -> str:
    """Version of the installed distribution, or ``0.0.0`` when running from a bare checkout."""
    try:
        return version(_DIST_NAME)
    except PackageNotFoundError:
        return "0.0.0"
