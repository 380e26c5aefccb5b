"""Announcement routes."""

from typing import Optional

from fastapi import APIRouter

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import CurrentSession, StaffSession
from core.dependencies import PostManagerDep
from models.post import PostModel
from schemas.post import CreatePostRequest, PostInfo, PostListResponse

router = APIRouter(prefix="/api/posts", tags=["Posts"])


def _build_post_info(model: PostModel, author_name: Optional[str] = None) -> PostInfo:
    info = PostInfo.model_validate(model)
    info.author_name = author_name
    return info


@router.post("", response_model=PostInfo, summary="Create a post")
def create_post(
    req: CreatePostRequest,
    session: StaffSession,
    post_manager: PostManagerDep,
) -> PostInfo:
    model = post_manager.create_post(
        session.user_id, req.title, req.content, is_published=req.is_published
    )
    return _build_post_info(model, session.user.full_name)


@router.get("/mine", response_model=PostListResponse, summary="List my posts")
def list_my_posts(session: StaffSession, post_manager: PostManagerDep) -> PostListResponse:
    models = post_manager.list_posts_by_author(session.user_id)
    return PostListResponse(
        posts=[_build_post_info(m, session.user.full_name) for m in models]
    )


@router.get("/all", response_model=PostListResponse, summary="List every post")
def list_all_posts(session: StaffSession, post_manager: PostManagerDep) -> PostListResponse:
    return PostListResponse(
        posts=[_build_post_info(m, name) for m, name in post_manager.list_all_posts()]
    )


@router.get("/feed", response_model=PostListResponse, summary="Published announcements")
def feed(
    session: CurrentSession,
    post_manager: PostManagerDep,
    limit: Optional[int] = None,
) -> PostListResponse:
    return PostListResponse(
        posts=[_build_post_info(m, name) for m, name in post_manager.list_published(limit)]
    )


@router.patch("/{post_id}/publish", response_model=PostInfo, summary="Publish or unpublish a post")
def set_published(
    post_id: str,
    is_published: bool,
    session: StaffSession,
    post_manager: PostManagerDep,
) -> PostInfo:
    try:
        model = post_manager.set_published(
            post_id, is_published, session.user_id, is_admin=session.role == "admin"
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_post_info(model)


@router.delete("/{post_id}", summary="Delete a post")
def delete_post(post_id: str, session: StaffSession, post_manager: PostManagerDep) -> dict:
    try:
        post_manager.delete_post(post_id, session.user_id, is_admin=session.role == "admin")
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Post deleted successfully"}
