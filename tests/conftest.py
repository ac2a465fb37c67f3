import os
import logging
import threading

import pytest

from static_server import StaticHTTPServer
from utils import LOGGER_NAME, ServerConfig

INDEX_BODY = b"<b>hi</b>\n"
STYLE_BODY = (b"body { margin: 0; }\n" * 250)[:5000]


@pytest.fixture(autouse=True)
def reset_logger():
    # setup_logging() detaches the logger from the root handlers that caplog uses
    logger = logging.getLogger(LOGGER_NAME)
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.propagate = True


@pytest.fixture
def docroot(tmp_path):
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_BODY)
    (root / "style.css").write_bytes(STYLE_BODY)
    (root / "app.js").write_bytes(b"console.log(1);\n")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    (root / "empty.json").write_bytes(b"")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_bytes(b"<p>docs</p>")
    (root / "bare").mkdir()

    (tmp_path / "secret.html").write_bytes(b"top secret")
    os.symlink(tmp_path / "secret.html", root / "escape.html")
    os.symlink(tmp_path, root / "outside")
    return os.path.realpath(root)


@pytest.fixture
def config(docroot):
    return ServerConfig.create(docroot, port=0)


@pytest.fixture
def make_server():
    servers = []

    def _make(config):
        server = StaticHTTPServer(config)
        thread = threading.Thread(target=server.start, daemon=True)
        thread.start()
        servers.append((server, thread))
        return server

    yield _make

    for server, thread in servers:
        server.close()
        thread.join(timeout=5)


@pytest.fixture
def server(make_server, config):
    return make_server(config)
