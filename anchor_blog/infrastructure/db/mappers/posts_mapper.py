from __future__ import annotations

from typing import Any, Iterable, Mapping

from anchor_blog.domain.entities.post import Post


def _ids(values: Iterable[Any] | None) -> tuple[str, ...]:
    return tuple(str(value) for value in values or () if value is not None)


def map_row_to_post(row: Mapping[str, Any]) -> Post:
    return Post(
        id=str(row["id"]),
        title=row["title"],
        content=row["content"],
        author_id=str(row["author_id"]),
        tags=tuple(row.get("tags") or ()),
        view_count=int(row.get("view_count") or 0),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        likes=_ids(row.get("likes")),
        dislikes=_ids(row.get("dislikes")),
    )
