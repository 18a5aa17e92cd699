from flask import jsonify
from werkzeug.exceptions import HTTPException

from lobby.errors import LobbyError


def register_error_handlers(flask_app):
    """Every failure leaves as {"error": message} with the matching status."""

    @flask_app.errorhandler(LobbyError)
    def handle_lobby_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {type(exc).__name__}: {exc.message}")
        return jsonify({'error': exc.message}), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        message = 'not found' if exc.code == 404 else exc.description
        return jsonify({'error': message}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected(exc):
        flask_app.logger.error(f"[error] unhandled {type(exc).__name__}: {exc}", exc_info=True)
        return jsonify({'error': str(exc) or 'server error'}), 500
