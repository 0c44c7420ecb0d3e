import pytest

from debtclarity.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # Tests patch env vars; make sure no cached Settings leaks between them.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
