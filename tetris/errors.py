# Errors raised while validating a submitted score.
# Each error carries a snake_case 'reason' that the server
# sends back as {"status": "error", "reason": ...}.


class ScoreValidationError(Exception):
    """Base class for every reason a score submission can be rejected."""
    reason = "invalid_score"


class NameEmpty(ScoreValidationError):
    reason = "name_empty"

    def __init__(self):
        super().__init__("Name should not be empty")


class NameTooLong(ScoreValidationError):
    reason = "name_too_long"

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Name must be at most 3 bytes long, but was {length}")


class NameNotAlphanumeric(ScoreValidationError):
    reason = "name_not_alphanumeric"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name must contain only alphanumeric characters, but was {name}")


class UnexpectedScore(ScoreValidationError):
    reason = "unexpected_score"

    def __init__(self, expected: int, given: int):
        self.expected = expected
        self.given = given
        super().__init__(f"Score does not match game history: history suggests {expected} but was {given}")


class ReplayLimitExceeded(ScoreValidationError):
    reason = "replay_limit_exceeded"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Game history did not end within {limit} ticks")


class MalformedMessage(ScoreValidationError):
    reason = "malformed_message"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Malformed score message: {detail}")
