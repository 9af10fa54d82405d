"""
Test configuration for Reggae tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stdlib import BufferSink


@pytest.fixture
def sink():
  """In-memory output sink"""
  return BufferSink()
