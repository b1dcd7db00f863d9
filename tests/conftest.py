"""
Pytest configuration.
Puts the project root on sys.path so tests import app, api, repositories, etc.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
