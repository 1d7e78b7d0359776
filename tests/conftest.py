"""
Pytest configuration for cadgeom tests.
Adds src/ (for 'import cadgeom') and the repository root (for 'tests.test_fixtures')
to sys.path so the suite runs without installing the package.
"""
import sys
from pathlib import Path

root_path = Path(__file__).parent.parent
for path in (root_path / "src", root_path):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
