import sys, os
import uuid

import esper
import pytest

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tilepuzzle.world import create_world


@pytest.fixture
def world():
    """Fresh esper world per test, dropped afterwards."""
    name = create_world(f"test-{uuid.uuid4().hex}")
    yield name
    esper.switch_world("default")
    esper.delete_world(name)
