from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()


def _bearer_token(request):
    auth = request.headers.get('Authorization', '')
    if auth.startswith('Bearer '):
        return auth[len('Bearer '):]
    return None


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    CORS(
        flask_app,
        origins=flask_app.config.get('CORS_ORIGINS', '*'),
        allow_headers=['Content-Type', 'Authorization'],
    )

    # The store is created here and owned by the app; routes reach it through app.extensions
    from lobby.persistence import make_sink
    from lobby.store import LobbyStore
    from lobby.services.rooms import RoomLifecycle
    store = LobbyStore(make_sink(flask_app), code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6))
    store.load()
    flask_app.extensions['lobby'] = RoomLifecycle(store)

    # Register blueprints here
    from lobby.main import main
    flask_app.register_blueprint(main)

    from lobby.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from lobby.api.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Bearer tokens instead of cookie sessions
    @login_manager.request_loader
    def load_user_from_request(request):
        accounts = current_app.extensions['lobby'].store.accounts
        return accounts.resolve_token(_bearer_token(request))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'unauthorized'}), 401

    @click.command('store-reset')
    @click.option('--seed', is_flag=True, help='Register testuser1..3 with password "password".')
    def store_reset_command(seed):
        """Replaces the snapshot with an empty lobby."""
        lifecycle = flask_app.extensions['lobby']
        lifecycle.store.reset()
        if seed:
            for username in ['testuser1', 'testuser2', 'testuser3']:
                lifecycle.store.accounts.register(username, 'password')
            lifecycle.store.persist()
        click.echo('Lobby store has been reset' + (' and seeded!' if seed else '!'))

    @click.command('store-summary')
    def store_summary_command():
        """Prints counts of users, rooms and concluded matches."""
        from lobby.models import RoomPhase
        store =flask_app.extensions['lobby'].store
        rooms = store.rooms.all()
        click.echo(f"users:   {store.accounts.count()}")
        click.echo(f"rooms:   {len(rooms)} ({sum(1 for r in rooms if r.phase is RoomPhase.ACTIVE)} active)")
        click.echo(f"matches: {len(store.history)}")

    flask_app.cli.add_command(store_reset_command)
    flask_app.cli.add_command(store_summary_command)

    return flask_app
