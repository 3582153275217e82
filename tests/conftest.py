"""
Pytest configuration and shared fixtures.

Provides a test application, a clean data directory for every test,
and a test client.  Uses the ``testing`` configuration with
``DATA_DIR`` pointed at a temporary directory, so the JSON data files
tests write never touch real data.

Time-dependent engine tests do not use these fixtures; they pass an
explicit ``now`` to the service functions instead.
"""

import json

import pytest

from assettrack import create_app
from assettrack.store import ASSETS_FILE, CONFIG_FILE, SUB_ASSETS_FILE


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """
    Create a Flask application configured for testing.

    The app is created once per test session against a temporary data
    directory.
    """
    data_dir = tmp_path_factory.mktemp("data")
    app = create_app("testing", DATA_DIR=str(data_dir))

    # Establish an application context for the entire test session.
    with app.app_context():
        yield app


@pytest.fixture(scope="function")
def data_dir(app, tmp_path):  # pylint: disable=redefined-outer-name
    """
    Give each test its own empty data directory.

    Each test starts with empty ``Assets.json`` and ``SubAssets.json``
    and no ``config.json``; the app config is restored afterwards.
    """
    previous = app.config["DATA_DIR"]
    app.config["DATA_DIR"] = str(tmp_path)
    (tmp_path / ASSETS_FILE).write_text("[]", encoding="utf-8")
    (tmp_path / SUB_ASSETS_FILE).write_text("[]", encoding="utf-8")

    yield tmp_path

    app.config["DATA_DIR"] = previous


@pytest.fixture
def write_data(data_dir):  # pylint: disable=redefined-outer-name
    """
    Seed the data directory.

    Usage in tests::

        def test_something(write_data):
            write_data(assets=[{...}], sub_assets=[{...}])
    """

    def _write(assets=None, sub_assets=None, config=None):
        if assets is not None:
            (data_dir / ASSETS_FILE).write_text(json.dumps(assets), encoding="utf-8")
        if sub_assets is not None:
            (data_dir / SUB_ASSETS_FILE).write_text(json.dumps(sub_assets), encoding="utf-8")
        if config is not None:
            (data_dir / CONFIG_FILE).write_text(json.dumps(config), encoding="utf-8")

    return _write


@pytest.fixture(scope="function")
def client(app, data_dir):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client
