"""Message service error taxonomy.

Every failure the board client recovers from is a MessageServiceError;
anything else is a bug and propagates.
"""


class MessageServiceError(Exception):
    """Base error for message service calls."""

    kind = "service"
    default_user_message = "Something went wrong talking to the message board."

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.user_message = user_message or self.default_user_message


class ServiceConnectivityError(MessageServiceError):
    """Service unreachable, timed out, or unavailable (5xx)."""

    kind = "connectivity"
    default_user_message = (
        "Cannot connect to the message board. Check that the server is running."
    )


class MessageRejectedError(MessageServiceError):
    """Service reachable but declined the request (validation, conflict, auth)."""

    kind = "rejection"
    default_user_message = "The message board rejected the request."


class MessageNotFoundError(MessageServiceError):
    """Target message no longer exists."""

    kind = "not_found"
    default_user_message = "That message no longer exists."
