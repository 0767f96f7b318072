import logging
import sys
from pathlib import Path

import pytest

# Ensure 'src' directory is on sys.path for tests
PROJECT_ROOT = Path(__file__).resolve().parent
SRC_DIR = PROJECT_ROOT / 'src'
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture(autouse=True)
def reset_pyseam_logger():
    """Undo handlers and levels installed by ``configure_logging``."""
    yield
    logger = logging.getLogger('pyseam')
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
