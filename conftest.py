"""
Pytest configuration file.

Puts the project root on sys.path so tests can import `src.tokenization`
without installing the package.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))
