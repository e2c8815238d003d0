import pytest

from convkernel.config import BACKEND_ENV, DEVICE_ENV, MAX_OUTPUT_ENV, STRICT_ENV


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (BACKEND_ENV, STRICT_ENV, MAX_OUTPUT_ENV, DEVICE_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(params=["numpy", "python"])
def backend_name(request):
    return request.param
