"""
This is the top-level conftest.py for the BlueGreen router.

Pytest plugins that affect the entire test suite should be defined here.
"""

import sys
from pathlib import Path

# Add project root to the Python path
# This ensures that absolute imports like 'from bluegreen....' work correctly
# from anywhere within the project during test execution.
sys.path.insert(0, str(Path(__file__).parent))
