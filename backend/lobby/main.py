from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user

from lobby.api import json_body

main = Blueprint('main', __name__)


def _store():
    return current_app.extensions['lobby'].store


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the lobby server!', 'status': 'ok'})


@main.route('/api/register', methods=['POST'])
def register():
    data = json_body()
    store = _store()
    token, user = store.accounts.register(data.get('username'), data.get('password'))
    store.persist()
    return jsonify({'token': token, 'user': store.accounts.user_view(user)})


@main.route('/api/login', methods=['POST'])
def login():
    data = json_body()
    store = _store()
    token, user = store.accounts.login(data.get('username'), data.get('password'))
    store.persist()
    return jsonify({'token': token, 'user': store.accounts.user_view(user)})


@main.route('/api/me')
@login_required
def me():
    return jsonify({'user': _store().accounts.user_view(current_user._get_current_object())})
