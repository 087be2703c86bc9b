from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def userdata_path() -> Path:
    return FIXTURES / "userdata.yaml"


@pytest.fixture
def userdata_bytes(userdata_path: Path) -> bytes:
    return userdata_path.read_bytes()


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


@pytest.fixture
def capture() -> Capture:
    return Capture()
