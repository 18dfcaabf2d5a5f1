from flask import jsonify, request

from campuslib.utils.errors import ValidationError


def json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def json_ok(data=None, code=200, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), code


def json_body() -> dict:
    """Request body as a JSON object; an empty or missing body reads as ``{}``."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data
