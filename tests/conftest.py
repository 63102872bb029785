import pytest, moderngl
from inkflow.config import AppConfig


@pytest.fixture(scope="module")
def ctx():
    try:
        return moderngl.create_standalone_context()
    except Exception as e:
        pytest.skip(f"Could not create headless GL context: {e}")


@pytest.fixture
def small_cfg():
    # tiny grid, full-resolution sim so sizes are easy to reason about
    return AppConfig(width=64, height=48, sim_scale=1.0, backend="cpu")
