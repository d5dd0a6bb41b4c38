import numpy as np
import pytest

from worldvoice.session_store import clear_conversations


def pcm_frame(value: int, samples: int = 960) -> bytes:
    """Constant-amplitude int16 frame (20 ms at 48 kHz by default)."""
    return np.full(samples, value, dtype="<i2").tobytes()


@pytest.fixture(autouse=True)
def _clean_conversations():
    clear_conversations()
    yield
    clear_conversations()


@pytest.fixture
def loud_frame() -> bytes:
    return pcm_frame(2000)


@pytest.fixture
def quiet_frame() -> bytes:
    return pcm_frame(200)
