"""Compose drafts: content length rules for new messages and replies."""

from dataclasses import dataclass

MIN_LENGTH = 3
MAX_LENGTH = 200


class ContentValidationError(ValueError):
    """Draft content is outside the allowed length."""


def validate_content(content: str) -> str:
    """Return content unchanged if its length is allowed, else raise."""
    length = len(content)
    if not content.strip():
        raise ContentValidationError("Message cannot be empty")
    if length < MIN_LENGTH:
        raise ContentValidationError(
            f"Message must be at least {MIN_LENGTH} characters long"
        )
    if length > MAX_LENGTH:
        raise ContentValidationError(
            f"Message is too long. Please shorten it by {length - MAX_LENGTH} characters."
        )
    return content


@dataclass
class ComposeDraft:
    """
    Text being composed. Kept intact when a submit fails so the user
    does not lose it; cleared only after the service accepted it.
    """

    content: str = ""

    @property
    def length(self) -> int:
        return len(self.content)

    @property
    def remaining(self) -> int:
        return MAX_LENGTH - self.length

    @property
    def shortfall(self) -> int:
        """Characters still needed to reach the minimum."""
        return max(0, MIN_LENGTH - self.length)

    @property
    def overflow(self) -> int:
        return max(0, self.length - MAX_LENGTH)

    @property
    def is_valid(self) -> bool:
        return self.validation_error() is None

    def validation_error(self) -> str | None:
        try:
            validate_content(self.content)
        except ContentValidationError as e:
            return str(e)
        return None

    def clear(self) -> None:
        self.content = ""
