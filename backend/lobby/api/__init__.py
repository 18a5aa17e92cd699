from flask import request

from lobby.errors import BadRequest


def json_body() -> dict:
    """Request body as a dict; an empty body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data():
            raise BadRequest('malformed JSON body')
        return {}
    if not isinstance(data, dict):
        raise BadRequest('JSON body must be an object')
    return data
