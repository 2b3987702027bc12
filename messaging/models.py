"""Message board payload models.

The service speaks camelCase JSON; models accept both the wire names and the
Python field names.
"""

from datetime import datetime
from typing import Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

MessageId = int | str


class Message(BaseModel):
    """
    A posted message, root or reply. Immutable once created.

    ``replies`` is ``None`` when the service did not embed the subtree;
    an empty list means the service reported "no replies".
    """

    id: MessageId
    content: str
    author: str = Field(validation_alias=AliasChoices("username", "author"))
    created_at: datetime = Field(
        validation_alias=AliasChoices("createdAt", "created_at")
    )
    last_modified_at: datetime | None = Field(
        None, validation_alias=AliasChoices("lastModifiedAt", "last_modified_at")
    )
    parent_id: MessageId | None = Field(
        None,
        validation_alias=AliasChoices("repliedToId", "parentId", "parent_id"),
    )
    replies: list["Message"] | None = None
    reply_count: int | None = Field(
        None, ge=0, validation_alias=AliasChoices("replyCount", "reply_count")
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_not_own_parent(self) -> Self:
        if self.parent_id is not None and self.parent_id == self.id:
            raise ValueError(f"message {self.id} cannot reply to itself")
        return self

    def is_reply(self) -> bool:
        """Check if this message replies to another message."""
        return self.parent_id is not None


class User(BaseModel):
    """Authenticated board user."""

    id: str
    username: str
    email: str

    model_config = ConfigDict(coerce_numbers_to_str=True)


class LoginCredentials(BaseModel):
    username_or_email: str = Field(serialization_alias="usernameOrEmail")
    password: str
    remember_me: bool = Field(False, serialization_alias="rememberMe")


class Registration(LoginCredentials):
    username: str
    email: str
