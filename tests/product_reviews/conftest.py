import pytest
from protean.integrations.pytest import DomainFixture

from product_reviews.cache import reset_cache, set_cache
from product_reviews.cache.fake_adapter import InMemoryReviewCache
from product_reviews.collaborators import reset_collaborators, set_product_directory, set_purchase_verifier
from product_reviews.collaborators.fake_adapter import FakeProductDirectory, FakePurchaseVerifier


@pytest.fixture(scope="session")
def reviews_bed():
    from product_reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    with reviews_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def cache():
    """A fresh in-memory cache per test."""
    fake = InMemoryReviewCache()
    set_cache(fake)
    yield fake
    reset_cache()


@pytest.fixture(autouse=True)
def purchase_verifier():
    fake = FakePurchaseVerifier()
    set_purchase_verifier(fake)
    yield fake
    reset_collaborators()


@pytest.fixture(autouse=True)
def product_directory():
    fake = FakeProductDirectory()
    set_product_directory(fake)
    yield fake
    reset_collaborators()


@pytest.fixture()
def custom_settings():
    """Temporarily override ``[custom]`` settings of the active domain."""
    from protean.utils.globals import current_domain

    custom = current_domain.config["custom"]
    original = dict(custom)
    yield custom
    custom.clear()
    custom.update(original)


@pytest.fixture()
def auto_approve(custom_settings):
    """Publish reviews without moderation."""
    custom_settings["MODERATION_REQUIRED"] = False
    return custom_settings
