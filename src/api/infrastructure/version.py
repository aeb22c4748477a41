"""Version management for the Flows Admin API.

Provides version information using importlib.metadata with fallback to pyproject.toml.
Installed packages report their metadata; a source checkout reads the
project table directly.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "flows-admin-api"


def get_version() -> str:
    """Get the application version.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        # src/api/infrastructure/version.py -> repository root
        pyproject_path = Path(__file__).resolve().parents[3] / "pyproject.toml"

        with open(pyproject_path, "rb") as f:
            pyproject_data = tomllib.load(f)

        return pyproject_data["project"]["version"]


__version__ = get_version()
