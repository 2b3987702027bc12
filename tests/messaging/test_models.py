"""Tests for messaging/models.py."""

import pytest
from pydantic import ValidationError

from messaging.models import LoginCredentials, Message, Registration, User

WIRE_MESSAGE = {
    "id": 12,
    "content": "Hello board",
    "username": "erin",
    "createdAt": "2024-05-01T10:00:00Z",
    "lastModifiedAt": "2024-05-01T10:05:00Z",
    "repliedToId": 7,
    "replies": None,
    "replyCount": 3,
}


class TestMessage:
    def test_parses_wire_names(self):
        message = Message.model_validate(WIRE_MESSAGE)
        assert message.author == "erin"
        assert message.parent_id == 7
        assert message.reply_count == 3
        assert message.replies is None
        assert message.created_at.year == 2024
        assert message.is_reply() is True

    def test_embedded_replies(self):
        root = dict(WIRE_MESSAGE, id=7, repliedToId=None, replies=[WIRE_MESSAGE])
        message = Message.model_validate(root)
        assert message.is_reply() is False
        assert [r.id for r in message.replies] == [12]

    def test_parent_id_alias(self):
        data = dict(WIRE_MESSAGE)
        del data["repliedToId"]
        data["parentId"] = "7"
        assert Message.model_validate(data).parent_id == "7"

    def test_self_reply_rejected(self):
        with pytest.raises(ValidationError, match="cannot reply to itself"):
            Message.model_validate(dict(WIRE_MESSAGE, repliedToId=12))

    def test_negative_reply_count_rejected(self):
        with pytest.raises(ValidationError):
            Message.model_validate(dict(WIRE_MESSAGE, replyCount=-1))

    def test_frozen(self):
        message = Message.model_validate(WIRE_MESSAGE)
        with pytest.raises(ValidationError):
            message.content = "changed"


class TestAuthModels:
    def test_credentials_dump_camel_case(self):
        creds = LoginCredentials(username_or_email="erin", password="pw")
        assert creds.model_dump(by_alias=True) == {
            "usernameOrEmail": "erin",
            "password": "pw",
            "rememberMe": False,
        }

    def test_registration_includes_profile(self):
        reg = Registration(
            username_or_email="erin", password="pw", username="erin", email="e@x.io"
        )
        dumped = reg.model_dump(by_alias=True)
        assert dumped["username"] == "erin"
        assert dumped["email"] == "e@x.io"

    def test_user_numeric_id(self):
        user = User.model_validate({"id": 5, "username": "erin", "email": "e@x.io"})
        assert user.id == "5"
