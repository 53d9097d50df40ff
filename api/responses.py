from flask import jsonify


def envelope(message: str, data=None, status: int = 200, success: bool = True, **extra):
    """Uniform JSON body: {"success", "message", "data"}."""
    payload = {"success": success, "message": message}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status


def error_response(message: str, status: int, details: dict | None = None):
    if details:
        return envelope(message, status=status, success=False, details=details)
    return envelope(message, status=status, success=False)
