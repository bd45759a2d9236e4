import pytest

from postboard.domain import commands, events


@pytest.mark.no_db
def test_command_from_dict_ignores_unknown_fields():
    payload = {
        "user_id": 3,
        "post_id": 9,
        "text": "nice",
        "unexpected": "drop-me",
    }

    cmd = commands.AddComment.from_dict(payload)

    assert cmd == commands.AddComment(user_id=3, post_id=9, text="nice")
    # unknown field should not become an attribute
    assert not hasattr(cmd, "unexpected")


@pytest.mark.no_db
def test_event_from_dict_tolerant_reader():
    payload = {"post_id": 1, "comment_id": 4, "user_id": 2, "extra": "noise"}

    evt = events.CommentRemoved.from_dict(payload)

    assert evt == events.CommentRemoved(post_id=1, comment_id=4, user_id=2)
    assert not hasattr(evt, "extra")


@pytest.mark.no_db
def test_post_commands_share_target_fields():
    cmd = commands.RemoveComment(user_id=1, post_id=2, comment_id=3)

    assert isinstance(cmd, commands.PostCommand)
    assert (cmd.user_id, cmd.post_id, cmd.comment_id) == (1, 2, 3)
    with pytest.raises(AttributeError):
        cmd.post_id = 5
