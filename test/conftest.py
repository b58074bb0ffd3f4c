"""
Test configuration for minilisp tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser
from interpreter import create_interpreter


@pytest.fixture
def parser():
    """Provide a fresh parser for each test"""
    return create_parser()


@pytest.fixture
def interpreter():
    """Provide a fresh interpreter for each test"""
    return create_interpreter()
