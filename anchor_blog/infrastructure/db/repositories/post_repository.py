from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from anchor_blog.application.ports.post_port import PostPort
from anchor_blog.domain.entities.post import PageRequest, Post, Reaction
from anchor_blog.domain.exceptions import PostNotFoundError, UserNotFoundError
from anchor_blog.infrastructure.db.errors import translate_db_errors
from anchor_blog.infrastructure.db.mappers.posts_mapper import map_row_to_post

POST_SELECT = """
    SELECT
        p.id, p.title, p.content, p.author_id, p.tags, p.view_count,
        p.created_at, p.updated_at,
        COALESCE(
            array_agg(r.user_id ORDER BY r.created_at) FILTER (WHERE r.reaction = 'like'),
            '{}'
        ) AS likes,
        COALESCE(
            array_agg(r.user_id ORDER BY r.created_at) FILTER (WHERE r.reaction = 'dislike'),
            '{}'
        ) AS dislikes
    FROM public.posts p
    LEFT JOIN public.post_reactions r ON r.post_id = p.id
"""

NEWEST_FIRST = "p.created_at DESC, p.id"

FOREIGN_KEY_VIOLATIONS = {
    "fk_posts_author": lambda: UserNotFoundError("Author not found."),
    "fk_post_reactions_post": lambda: PostNotFoundError("Post not found."),
    "fk_post_reactions_user": lambda: UserNotFoundError("User not found."),
}


def like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlPostRepository(PostPort):
    def __init__(self, engine):
        self._engine = engine

    def _fetch_many(
        self,
        *,
        where: str,
        params: dict,
        page: PageRequest,
        order_by: str = NEWEST_FIRST,
        operation: str,
    ) -> list[Post]:
        sql = f"""
            {POST_SELECT}
            {where}
            GROUP BY p.id
            ORDER BY {order_by}
            LIMIT :limit OFFSET :offset
        """
        with translate_db_errors(operation):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(sql),
                    {**params, "limit": page.limit, "offset": page.offset},
                ).mappings().all()
        return [map_row_to_post(row) for row in rows]

    def create_post(self, post: Post) -> Post:
        sql = """
            INSERT INTO public.posts (
                id, title, content, author_id, tags, view_count, created_at, updated_at
            ) VALUES (
                :id, :title, :content, :author_id, :tags, :view_count, :created_at, :updated_at
            )
        """
        with translate_db_errors("create_post", unique_violations=FOREIGN_KEY_VIOLATIONS):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {
                        "id": post.id,
                        "title": post.title,
                        "content": post.content,
                        "author_id": post.author_id,
                        "tags": list(post.tags),
                        "view_count": post.view_count,
                        "created_at": post.created_at,
                        "updated_at": post.updated_at,
                    },
                )
        return post

    def get_post(self, *, post_id: str) -> Post | None:
        sql = f"""
            {POST_SELECT}
            WHERE p.id = :post_id
            GROUP BY p.id
        """
        with translate_db_errors("get_post"):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"post_id": post_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_post(row)

    def list_posts(self, *, page: PageRequest) -> list[Post]:
        return self._fetch_many(where="", params={}, page=page, operation="list_posts")

    def search_by_title(self, *, query: str, page: PageRequest) -> list[Post]:
        return self._fetch_many(
            where="WHERE p.title ILIKE :pattern ESCAPE '\\'",
            params={"pattern": like_pattern(query)},
            page=page,
            operation="search_posts_by_title",
        )

    def list_by_author(self, *, author_id: str, page: PageRequest) -> list[Post]:
        return self._fetch_many(
            where="WHERE p.author_id::text = :author_id",
            params={"author_id": author_id},
            page=page,
            operation="list_posts_by_author",
        )

    def filter_by_tags(self, *, tags: tuple[str, ...], page: PageRequest) -> list[Post]:
        return self._fetch_many(
            where="WHERE p.tags && CAST(:tags AS text[])",
            params={"tags": list(tags)},
            page=page,
            operation="filter_posts_by_tags",
        )

    def filter_by_created_range(self, *, start: datetime, end: datetime, page: PageRequest) -> list[Post]:
        return self._fetch_many(
            where="WHERE p.created_at >= :start AND p.created_at < :end",
            params={"start": start, "end": end},
            page=page,
            operation="filter_posts_by_date",
        )

    def update_post(
        self,
        *,
        post_id: str,
        title: str,
        content: str,
        tags: tuple[str, ...],
        updated_at: datetime,
    ) -> Post | None:
        sql = """
            UPDATE public.posts
            SET title = :title,
                content = :content,
                tags = :tags,
                updated_at = :updated_at
            WHERE id = :post_id
            RETURNING id
        """
        with translate_db_errors("update_post"):
            with self._engine.begin() as conn:
                row = conn.execute(
                    text(sql),
                    {
                        "post_id": post_id,
                        "title": title,
                        "content": content,
                        "tags": list(tags),
                        "updated_at": updated_at,
                    },
                ).first()
        if row is None:
            return None
        return self.get_post(post_id=post_id)

    def delete_post(self, *, post_id: str) -> bool:
        sql = """
            DELETE FROM public.posts
            WHERE id = :post_id
            RETURNING id
        """
        with translate_db_errors("delete_post"):
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), {"post_id": post_id}).first()
        return row is not None

    def set_reaction(self, *, post_id: str, user_id: str, reaction: Reaction, reacted_at: datetime) -> bool:
        sql = build_set_reaction_sql()
        with translate_db_errors("set_post_reaction", unique_violations=FOREIGN_KEY_VIOLATIONS):
            with self._engine.begin() as conn:
                row = conn.execute(
                    text(sql),
                    {
                        "post_id": post_id,
                        "user_id": user_id,
                        "reaction": Reaction(reaction).value,
                        "created_at": reacted_at,
                    },
                ).first()
        return row is not None

    def remove_reaction(self, *, post_id: str, user_id: str, reaction: Reaction) -> bool:
        sql = """
            DELETE FROM public.post_reactions
            WHERE post_id = :post_id
              AND user_id = :user_id
              AND reaction = :reaction
            RETURNING post_id
        """
        with translate_db_errors("remove_post_reaction"):
            with self._engine.begin() as conn:
                row = conn.execute(
                    text(sql),
                    {"post_id": post_id, "user_id": user_id, "reaction": Reaction(reaction).value},
                ).first()
        return row is not None

    def increment_view_count(self, *, post_id: str) -> int | None:
        sql = """
            UPDATE public.posts
            SET view_count = view_count + 1
            WHERE id = :post_id
            RETURNING view_count
        """
        with translate_db_errors("increment_post_views"):
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), {"post_id": post_id}).mappings().first()
        if row is None:
            return None
        return int(row["view_count"])

    def most_viewed(self, *, limit: int) -> list[Post]:
        return self._fetch_many(
            where="",
            params={},
            page=PageRequest(page=1, limit=limit),
            order_by="p.view_count DESC, p.created_at DESC",
            operation="most_viewed_posts",
        )

    def total_views(self) -> int:
        sql = """
            SELECT COALESCE(SUM(view_count), 0)
            FROM public.posts
        """
        with translate_db_errors("total_post_views"):
            with self._engine.connect() as conn:
                total = conn.execute(text(sql)).scalar_one()
        return int(total)


def build_set_reaction_sql() -> str:
    # Upsert that only writes when the reaction changes; no row back means it was already set.
    return """
        INSERT INTO public.post_reactions (post_id, user_id, reaction, created_at)
        VALUES (:post_id, :user_id, :reaction, :created_at)
        ON CONFLICT (post_id, user_id) DO UPDATE
        SET reaction = EXCLUDED.reaction,
            created_at = EXCLUDED.created_at
        WHERE public.post_reactions.reaction <> EXCLUDED.reaction
        RETURNING post_id
    """
