import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_sync_defaults_depend_on_platform():
    regular = Settings(NETLIFY="", VERCEL="").sync_options()
    serverless = Settings(NETLIFY="true").sync_options()

    assert (regular.max_products, regular.batch_size, regular.retry_attempts) == (200, 5, 2)
    assert (serverless.max_products, serverless.batch_size, serverless.retry_attempts) == (50, 3, 1)
    assert serverless.timeout == 7 * 60


def test_overrides_replace_settings():
    options = Settings(SYNC_MAX_PRODUCTS=20, NETLIFY="", VERCEL="").sync_options(batch_size=7, timeout=None)

    assert options.max_products == 20
    assert options.batch_size == 7
    assert options.timeout == 15 * 60


@pytest.mark.parametrize("field", ["SYNC_MAX_PRODUCTS", "SYNC_TIMEOUT_SECONDS", "SYNC_BATCH_SIZE"])
def test_explicit_zero_is_rejected_not_defaulted(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0}).sync_options()
