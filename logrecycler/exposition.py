"""Pull endpoint serving the log counter in Prometheus text format."""

import logging
import threading

from flask import Flask, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)


def create_metrics_app(registry: CollectorRegistry) -> Flask:
    app = Flask(__name__)

    @app.route("/metrics")
    def metrics():
        return Response(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


class MetricsServer:
    """Runs the metrics app in a daemon thread until ``stop``."""

    def __init__(self, app: Flask, host: str = "0.0.0.0", port: int = 9090):
        self._server = make_server(host, port, app, threaded=True)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def server_address(self) -> tuple[str, int]:
        return self._server.server_address[:2]

    def start(self):
        self._thread.start()
        host, port = self.server_address
        logger.info("Serving metrics on http://%s:%d/metrics", host, port)

    def stop(self):
        """Stop serving and release the listening socket."""
        if self._thread.is_alive():
            self._server.shutdown()
            self._thread.join(timeout=5)
        self._server.server_close()
        logger.info("Metrics server stopped")
