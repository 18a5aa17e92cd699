from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user

from lobby.api import json_body

rooms = Blueprint('rooms', __name__)


def _lifecycle():
    return current_app.extensions['lobby']


def _caller():
    return current_user._get_current_object()


@rooms.route('', methods=['POST'])
@login_required
def create_room():
    data = json_body()
    room = _lifecycle().create_room(_caller(), data.get('maxPlayers'))
    return jsonify({'room': room})


@rooms.route('/<string:room_id>/join', methods=['POST'])
@login_required
def join_room(room_id):
    room = _lifecycle().join(room_id, _caller())
    return jsonify({'room': room})


@rooms.route('/<string:room_id>/start', methods=['POST'])
@login_required
def start_room(room_id):
    data = json_body()
    room = _lifecycle().start(room_id, _caller(), data.get('state'))
    return jsonify({'room': room})


@rooms.route('/<string:room_id>/state', methods=['POST'])
@login_required
def update_state(room_id):
    data = json_body()
    revision = _lifecycle().update_state(
        room_id,
        _caller(),
        data.get('state'),
        winner_id=data.get('reportWinnerId'),
    )
    return jsonify({'ok': True, 'revision': revision})


@rooms.route('/<string:room_id>', methods=['GET'])
@login_required
def get_room(room_id):
    room = _lifecycle().read(room_id, _caller())
    return jsonify({'room': room})
