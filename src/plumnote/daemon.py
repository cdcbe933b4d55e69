"""
Sync daemon for plumnote.

Serves the responder side of the exchange on POST /sync.
"""

import logging

from flask import Flask, Response, request

from plumnote.config import Settings
from plumnote.errors import InvalidTransfer, PlumnoteError
from plumnote.store import Store
from plumnote.sync import SYNC_PATH, SyncEngine, check_payload_size

logger = logging.getLogger(__name__)


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def create_app(store: Store, settings: Settings) -> Flask:
    """Create the Flask app serving one store.

    Args:
        store: Store the exchanges read and write
        settings: Resolved settings (payload limit)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)
    engine = SyncEngine(store, settings.max_payload_bytes)

    @app.errorhandler(404)
    def not_found(error) -> Response:
        return _text("not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error) -> Response:
        return _text("method not allowed", 405)

    @app.route(SYNC_PATH, methods=["POST"])
    def sync() -> Response:
        """Merge the posted notes and answer with the local dirty notes.

        Request body: JSON array of notes (id, kind, tags, text, date, author)
        Response: JSON array of notes, possibly empty
        """
        try:
            check_payload_size(request.content_length, engine.max_payload_bytes)
            payload = request.get_data(cache=False)
            body = engine.respond(payload)
        except InvalidTransfer as e:
            logger.warning(f"Sync rejected from {request.remote_addr}: {e}")
            return _text(str(e), 400)
        except PlumnoteError as e:
            logger.error(f"Sync failed for {request.remote_addr}: {e}")
            return _text(str(e), 500)
        except Exception as e:
            logger.exception(f"Internal error during sync from {request.remote_addr}")
            return _text(f"internal error: {e}", 500)

        return Response(body, status=200, mimetype="application/json")

    return app


def serve(settings: Settings, port: int | None = None, host: str = "0.0.0.0") -> None:
    """Run the daemon until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    port = port or settings.port
    store = Store(settings.notes_path)
    app = create_app(store, settings)

    logger.info(f"Serving {store.path} on {host}:{port}{SYNC_PATH}")
    app.run(host=host, port=port, threaded=True)
