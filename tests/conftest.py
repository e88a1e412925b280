"""
Pytest configuration for the Mise test suite.

Puts the repository root on sys.path so the flat top-level packages
(app, core, domain, repositories, services) and the main CLI module import
without an editable install.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
