from postboard.domain import exceptions
from postboard.service_layer.messagebus import MessageBus


def get_bus() -> MessageBus:
    from postboard.bootstrap import get_message_bus
    return get_message_bus()


def resolve_post_id(post_id: str) -> int:
    # An identifier that cannot exist is reported like a missing post
    if not (post_id.isascii() and post_id.isdigit()):
        raise exceptions.PostNotFound("Post not found")
    return int(post_id)


def resolve_comment_id(comment_id: str) -> int:
    if not (comment_id.isascii() and comment_id.isdigit()):
        raise exceptions.CommentNotFound("Comment not found")
    return int(comment_id)
