import pytest
from flask.testing import FlaskClient

from lifespan.app import create_app


@pytest.fixture()
def app():
    flask_app = create_app(
        {
            "TESTING": True,
            "FETCH_PRICE_ON_STARTUP": False,
            "FALLBACK_PRICE": 50_000.0,
        }
    )
    yield flask_app


@pytest.fixture()
def client(app) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
