# Message constants and structural validation for the score protocol.
# Defines the shapes of the JSON bodies exchanged with the score server.

# Endpoint
SCORE_ENDPOINT = "/scores"

# Response status values
STATUS_OK = "ok"
STATUS_ERROR = "error"

# Error reasons not tied to score validation
REASON_INVALID_JSON = "invalid_json_format"
REASON_NOT_FOUND = "not_found"
REASON_METHOD_NOT_ALLOWED = "method_not_allowed"
REASON_INTERNAL_ERROR = "internal_server_error"

U32_MAX = 0xFFFFFFFF


def _is_u32(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U32_MAX


def validate_score(score) -> tuple[bool, str]:
    """
    Validate the structure of a Score object: {"value": u32, "name": str}.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(score, dict):
        return False, "score must be an object"
    if 'value' not in score:
        return False, "score requires 'value' field"
    if not _is_u32(score['value']):
        return False, "score.value must be an unsigned 32-bit integer"
    if 'name' not in score:
        return False, "score requires 'name' field"
    if not isinstance(score['name'], str):
        return False, "score.name must be a string"
    return True, ""


def validate_score_message(message) -> tuple[bool, str]:
    """
    Validate the top-level structure of a ScoreMessage.
    The history body is checked in detail when it is decoded.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(message, dict):
        return False, "Message must be an object"

    for field in ('score', 'history'):
        if field not in message:
            return False, f"Message requires '{field}' field"

    is_valid, error = validate_score(message['score'])
    if not is_valid:
        return False, error

    history = message['history']
    if not isinstance(history, dict):
        return False, "history must be an object"
    for field in ('seed', 'actions'):
        if field not in history:
            return False, f"history requires '{field}' field"

    return True, ""


def error_response(reason: str, message: str = "") -> dict:
    """Body of an error response, in the server's status/reason format."""
    response = {"status": STATUS_ERROR, "reason": reason}
    if message:
        response["message"] = message
    return response
