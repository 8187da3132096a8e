"""Root conftest.py for the benchpsu monorepo.

Puts every package's ``src`` directory on the import path and registers the
markers shared by all test suites.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from _pytest.config import Config


# Add all package src directories to path for imports
PROJECT_ROOT = Path(__file__).parent
for pkg_dir in PROJECT_ROOT.glob("benchpsu-*/src"):
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "integration: Integration test requiring a real Keithley 2230",
    )
    config.addinivalue_line(
        "markers",
        "slow: Slow-running test",
    )


def pytest_report_header(config: Config) -> list[str]:
    """Add package and coverage info to the pytest header.

    Args:
        config: pytest configuration object.

    Returns:
        List of header lines.
    """
    packages = sorted(p.parent.name for p in PROJECT_ROOT.glob("benchpsu-*/src"))
    lines = [f"benchpsu monorepo test suite ({', '.join(packages)})"]

    if getattr(config.option, "cov_source", None):
        lines.append("Coverage: enabled")

    return lines
