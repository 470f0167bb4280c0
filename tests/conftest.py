import os
import sys
import tempfile
from dataclasses import replace

BASE_DIR = tempfile.mkdtemp(prefix="docdrafts-tests-")

os.environ["DOCDRAFTS_DB_PATH"] = os.path.join(BASE_DIR, "drafts.sqlite3")
os.environ["DOCDRAFTS_LOG_FORMAT"] = "plain"
os.environ["DOCDRAFTS_METRICS_ENABLED"] = "false"
os.environ["DOCDRAFTS_OTEL_ENABLED"] = "false"
os.environ["DOCDRAFTS_SENTRY_DSN"] = ""

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from docdrafts.config import load_settings
from docdrafts.server import create_app
from docdrafts.services.store import open_store


@pytest.fixture()
def store(tmp_path):
    store = open_store(str(tmp_path / "drafts.sqlite3"), timeout=5, pool_size=4)
    yield store
    store.close()


@pytest.fixture()
def app(store):
    app = create_app(replace(load_settings(), db_path=store.db_path), store=store)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
