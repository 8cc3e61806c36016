from __future__ import annotations


class GameError(Exception):
    """Base for every error a caller is allowed to see.

    ``code`` is the stable machine-readable identifier returned in API
    payloads, ``message`` is the human-readable detail.
    """

    code = "game_error"
    status = 400
    message = "Request could not be completed"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(GameError):
    code = "invalid_payload"
    status = 400
    message = "Invalid request"


class RoomFull(ValidationError):
    code = "room_full"
    message = "Room is full"


class NotFound(GameError):
    code = "not_found"
    status = 404
    message = "Not found"


class RoomNotFound(NotFound):
    code = "room_not_found"
    message = "Room not found"


class ParticipantNotFound(NotFound):
    code = "participant_not_found"
    message = "Participant not found in room"


class RoomAlreadyPlaying(GameError):
    code = "room_already_playing"
    status = 409
    message = "A round is already in progress"


class NotHost(GameError):
    code = "only_host"
    status = 403
    message = "Only the host can perform this action"


class InvalidCredential(GameError):
    code = "invalid_credential"
    status = 401
    message = "Invalid credential"


class CredentialRequired(GameError):
    code = "credential_required"
    status = 401
    message = "Credential required"


class InsufficientParticipants(GameError):
    code = "insufficient_participants"
    status = 409
    message = "Not enough players"

    def __init__(self, minimum: int) -> None:
        self.minimum = minimum
        super().__init__(f"At least {minimum} players are required")


class NoWordsAvailable(GameError):
    code = "no_words"
    status = 409
    message = "At least one word is required"


class RateLimited(GameError):
    code = "rate_limited"
    status = 429
    message = "Too many requests"

    def __init__(self, retry_after: int) -> None:
        self.retry_after = max(1, int(retry_after))
        super().__init__(f"Too many requests, retry in {self.retry_after}s")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["retryAfter"] = self.retry_after
        return payload


class Unexpected(GameError):
    code = "internal_error"
    status = 500
    message = "Something went wrong"

    def __init__(self, correlation_id: str) -> None:
        self.correlation_id = correlation_id
        super().__init__()

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["correlationId"] = self.correlation_id
        return payload
