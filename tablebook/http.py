from flask import jsonify


def jerror(status: int, code: str, message: str, details: list | None = None):
    payload = {"success": False, "code": code, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def jok(data=None, message: str | None = None, status: int = 200):
    payload = {"success": True, "data": data}
    if message:
        payload["message"] = message
    return jsonify(payload), status
