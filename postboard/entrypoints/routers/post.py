from typing import Annotated

from fastapi import APIRouter, Depends

from postboard.domain import commands
from postboard.entrypoints.dependencies import get_bus, resolve_comment_id, resolve_post_id
from postboard.entrypoints.schemas.post import CommentI, Post, PostI, PostRemoved
from postboard.security import get_current_user_id
from postboard.service_layer.messagebus import MessageBus
from postboard.views import posts as post_views

router = APIRouter(prefix="/api/posts", tags=["posts"])

CurrentUserId = Annotated[int, Depends(get_current_user_id)]
Bus = Annotated[MessageBus, Depends(get_bus)]
PostId = Annotated[int, Depends(resolve_post_id)]
CommentId = Annotated[int, Depends(resolve_comment_id)]


@router.post("", response_model=Post, status_code=201)
async def create_post(post: PostI, user_id: CurrentUserId, bus: Bus):
    [created] = bus.handle(commands.CreatePost(user_id=user_id, text=post.text))
    return created


@router.get("", response_model=list[Post], status_code=200)
async def get_all_posts(user_id: CurrentUserId, bus: Bus):
    return post_views.list_posts(bus.uow)


@router.get("/{post_id}", response_model=Post, status_code=200)
async def get_post(user_id: CurrentUserId, post_id: PostId, bus: Bus):
    return post_views.get_post(post_id, bus.uow)


@router.delete("/{post_id}", response_model=PostRemoved, status_code=200)
async def delete_post(user_id: CurrentUserId, post_id: PostId, bus: Bus):
    bus.handle(commands.DeletePost(user_id=user_id, post_id=post_id))
    return {"detail": "Post removed"}


@router.post("/comment/{post_id}", response_model=Post, status_code=201)
async def create_comment(comment: CommentI, user_id: CurrentUserId, post_id: PostId, bus: Bus):
    [post] = bus.handle(commands.AddComment(user_id=user_id, post_id=post_id, text=comment.text))
    return post


@router.delete("/comment/{post_id}/{comment_id}", response_model=Post, status_code=200)
async def delete_comment(
    user_id: CurrentUserId, post_id: PostId, comment_id: CommentId, bus: Bus
):
    [post] = bus.handle(
        commands.RemoveComment(user_id=user_id, post_id=post_id, comment_id=comment_id)
    )
    return post


@router.put("/like/{post_id}", response_model=Post, status_code=200)
async def like_post(user_id: CurrentUserId, post_id: PostId, bus: Bus):
    [post] = bus.handle(commands.LikePost(user_id=user_id, post_id=post_id))
    return post


@router.put("/unlike/{post_id}", response_model=Post, status_code=200)
async def unlike_post(user_id: CurrentUserId, post_id: PostId, bus: Bus):
    [post] = bus.handle(commands.UnlikePost(user_id=user_id, post_id=post_id))
    return post
