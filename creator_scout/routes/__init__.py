from flask import request


def json_object():
    """Request body as a dict; {} when absent or not a JSON object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
