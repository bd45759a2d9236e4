import pytest

from postboard.domain import exceptions
from postboard.entrypoints.errors import status_for


@pytest.mark.no_db
@pytest.mark.parametrize(
    "exc, expected",
    [
        (exceptions.ValidationError("Text is required"), 400),
        (exceptions.DuplicateIdentity("User already exists"), 400),
        (exceptions.AlreadyLiked("Post already liked"), 400),
        (exceptions.NotLiked("Post has not yet been liked"), 400),
        (exceptions.PostNotFound("Post not found"), 404),
        (exceptions.CommentNotFound("Comment not found"), 404),
        (exceptions.Forbidden("User not authorized"), 403),
        (exceptions.MissingToken("No token"), 401),
        (exceptions.InvalidToken("Invalid token"), 401),
        (exceptions.Conflict("Post changed"), 409),
        (exceptions.DomainError("unclassified"), 500),
    ],
)
def test_domain_errors_map_to_http_status(exc, expected):
    assert status_for(exc) == expected
