from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from anchor_blog.api.deps import (
    get_create_post_use_case,
    get_current_identity,
    get_delete_post_use_case,
    get_filter_posts_use_case,
    get_get_post_use_case,
    get_list_posts_use_case,
    get_popular_posts_use_case,
    get_post_view_count_use_case,
    get_react_to_post_use_case,
    get_reaction_status_use_case,
    get_remove_reaction_use_case,
    get_search_posts_use_case,
    get_update_post_use_case,
    get_view_stats_use_case,
    require_roles,
)
from anchor_blog.api.schemas.posts import (
    CreatePostRequest,
    PostListResponse,
    PostResponse,
    ReactionStatusResponse,
    UpdatePostRequest,
    ViewCountResponse,
    ViewStatsResponse,
    to_post_list_response,
    to_post_response,
    to_reaction_status_response,
)
from anchor_blog.api.schemas.users import OkResponse
from anchor_blog.application.dto.auth import AuthContext
from anchor_blog.application.dto.posts import (
    CreatePostInput,
    DeletePostInput,
    FilterPostsInput,
    ReactionInput,
    SearchPostsInput,
    UpdatePostInput,
)
from anchor_blog.application.use_cases.post_reactions import (
    GetReactionStatusUseCase,
    ReactToPostUseCase,
    RemoveReactionUseCase,
)
from anchor_blog.application.use_cases.posts import (
    CreatePostUseCase,
    DeletePostUseCase,
    FilterPostsUseCase,
    GetPopularPostsUseCase,
    GetPostUseCase,
    GetPostViewCountUseCase,
    GetViewStatsUseCase,
    ListPostsUseCase,
    SearchPostsUseCase,
    UpdatePostUseCase,
)
from anchor_blog.domain.entities.post import Reaction
from anchor_blog.domain.entities.user import Role


router = APIRouter()

require_member = require_roles(Role.USER, Role.ADMIN, Role.SUPERADMIN)


def _split_tags(raw: str) -> tuple[str, ...]:
    return tuple(tag for tag in raw.split(",") if tag.strip())


@router.get("/v1/posts", response_model=PostListResponse)
def list_posts(
    page: int | None = None,
    limit: int | None = None,
    use_case: ListPostsUseCase = Depends(get_list_posts_use_case),
):
    return to_post_list_response(use_case.execute(page=page, limit=limit))


@router.get("/v1/posts/popular", response_model=PostListResponse)
def popular_posts(
    limit: int | None = None,
    use_case: GetPopularPostsUseCase = Depends(get_popular_posts_use_case),
):
    return to_post_list_response(use_case.execute(limit=limit))


@router.get("/v1/posts/search", response_model=PostListResponse)
def search_posts(
    query: str = "",
    search_type: str = Query(default="title", alias="type"),
    page: int | None = None,
    limit: int | None = None,
    use_case: SearchPostsUseCase = Depends(get_search_posts_use_case),
):
    outputs = use_case.execute(
        SearchPostsInput(query=query, search_type=search_type, page=page, limit=limit)
    )
    return to_post_list_response(outputs)


@router.get("/v1/posts/filter", response_model=PostListResponse)
def filter_posts(
    tags: str = "",
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    page: int | None = None,
    limit: int | None = None,
    use_case: FilterPostsUseCase = Depends(get_filter_posts_use_case),
):
    outputs = use_case.execute(
        FilterPostsInput(
            tags=_split_tags(tags),
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    )
    return to_post_list_response(outputs)


@router.get("/v1/stats/views", response_model=ViewStatsResponse)
def view_stats(use_case: GetViewStatsUseCase = Depends(get_view_stats_use_case)):
    return ViewStatsResponse(total_views=use_case.execute())


@router.post("/v1/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    req: CreatePostRequest,
    identity: AuthContext = Depends(require_member),
    use_case: CreatePostUseCase = Depends(get_create_post_use_case),
):
    output = use_case.execute(
        CreatePostInput(
            author_id=identity.user_id,
            title=req.title,
            content=req.content,
            tags=tuple(req.tags),
        )
    )
    return to_post_response(output)


@router.get("/v1/posts/{post_id}", response_model=PostResponse)
def get_post(
    post_id: str,
    use_case: GetPostUseCase = Depends(get_get_post_use_case),
):
    return to_post_response(use_case.execute(post_id=post_id))


@router.get("/v1/posts/{post_id}/views", response_model=ViewCountResponse)
def post_views(
    post_id: str,
    use_case: GetPostViewCountUseCase = Depends(get_post_view_count_use_case),
):
    return ViewCountResponse(post_id=post_id, view_count=use_case.execute(post_id=post_id))


@router.put("/v1/posts/{post_id}", response_model=PostResponse)
def update_post(
    post_id: str,
    req: UpdatePostRequest,
    identity: AuthContext = Depends(require_member),
    use_case: UpdatePostUseCase = Depends(get_update_post_use_case),
):
    output = use_case.execute(
        UpdatePostInput(
            post_id=post_id,
            actor_id=identity.user_id,
            actor_role=identity.role,
            title=req.title,
            content=req.content,
            tags=tuple(req.tags) if req.tags is not None else None,
        )
    )
    return to_post_response(output)


@router.delete("/v1/posts/{post_id}", response_model=OkResponse)
def delete_post(
    post_id: str,
    identity: AuthContext = Depends(require_member),
    use_case: DeletePostUseCase = Depends(get_delete_post_use_case),
):
    use_case.execute(DeletePostInput(post_id=post_id, actor_id=identity.user_id, actor_role=identity.role))
    return OkResponse(ok=True)


@router.post("/v1/posts/{post_id}/like", response_model=ReactionStatusResponse)
def like_post(
    post_id: str,
    identity: AuthContext = Depends(require_member),
    use_case: ReactToPostUseCase = Depends(get_react_to_post_use_case),
):
    output = use_case.execute(ReactionInput(post_id=post_id, user_id=identity.user_id, reaction=Reaction.LIKE))
    return to_reaction_status_response(output)


@router.delete("/v1/posts/{post_id}/like", response_model=ReactionStatusResponse)
def unlike_post(
    post_id: str,
    identity: AuthContext = Depends(require_member),
    use_case: RemoveReactionUseCase = Depends(get_remove_reaction_use_case),
):
    output = use_case.execute(ReactionInput(post_id=post_id, user_id=identity.user_id, reaction=Reaction.LIKE))
    return to_reaction_status_response(output)


@router.post("/v1/posts/{post_id}/dislike", response_model=ReactionStatusResponse)
def dislike_post(
    post_id: str,
    identity: AuthContext = Depends(require_member),
    use_case: ReactToPostUseCase = Depends(get_react_to_post_use_case),
):
    output = use_case.execute(
        ReactionInput(post_id=post_id, user_id=identity.user_id, reaction=Reaction.DISLIKE)
    )
    return to_reaction_status_response(output)


@router.delete("/v1/posts/{post_id}/dislike", response_model=ReactionStatusResponse)
def undislike_post(
    post_id: str,
    identity: AuthContext = Depends(require_member),
    use_case: RemoveReactionUseCase = Depends(get_remove_reaction_use_case),
):
    output = use_case.execute(
        ReactionInput(post_id=post_id, user_id=identity.user_id, reaction=Reaction.DISLIKE)
    )
    return to_reaction_status_response(output)


@router.get("/v1/posts/{post_id}/like-status", response_model=ReactionStatusResponse)
def reaction_status(
    post_id: str,
    identity: AuthContext = Depends(get_current_identity),
    use_case: GetReactionStatusUseCase = Depends(get_reaction_status_use_case),
):
    return to_reaction_status_response(use_case.execute(post_id=post_id, user_id=identity.user_id))
