"""
Blog post and podcast episode routes.

Both kinds share one set of handlers; build_router() binds them to a kind
and to the form dependency that reads that kind's multipart fields.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from cms.adapters.clock import SystemClock
from cms.adapters.fs.filestore import FileSystemStore
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo, SQLiteUserRepo
from cms.api.deps import (
    get_activity_repo,
    get_clock,
    get_content_repo,
    get_current_identity,
    get_file_store,
    get_optional_identity,
    get_rules,
    get_rules_adapter,
    get_user_repo,
)
from cms.api.errors import parse_uuid, raise_for
from cms.api.schemas import (
    BlogResponse,
    ContentListResponse,
    DeleteResponse,
    PodcastResponse,
    to_response,
)
from cms.components.attachments import Upload
from cms.components.content import (
    NOT_FOUND_MESSAGES,
    CreateContentInput,
    DeleteContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from cms.components.lifecycle import KIND_LABELS
from cms.domain.entities import ContentKind, ContentStatus, Identity, SortKey
from cms.domain.normalize import ContentFields, FieldError, normalize_fields
from cms.rules.adapter import RulesAdapter
from cms.rules.models import Rules

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ContentForm:
    """Raw multipart values for one request."""

    fields: dict[str, Any]
    uploads: tuple[Upload, ...]


def _read_uploads(field_name: str, files: list[UploadFile] | None) -> list[Upload]:
    uploads = []
    for f in files or []:
        # Browsers send an empty part for an untouched file input
        if not f.filename:
            continue
        uploads.append(
            Upload(
                field=field_name,
                filename=f.filename,
                content_type=f.content_type or "application/octet-stream",
                data=f.file.read(),
            )
        )
    return uploads


def blog_form(
    title: str | None = Form(None),
    excerpt: str | None = Form(None),
    content: str | None = Form(None),
    category: str | None = Form(None),
    tags: str | None = Form(None),
    featured: str | None = Form(None),
    status: str | None = Form(None),
    scheduled_at: str | None = Form(None, alias="scheduledAt"),
    author: str | None = Form(None),
    image: list[UploadFile] | None = File(None),
) -> ContentForm:
    return ContentForm(
        fields={
            "title": title,
            "excerpt": excerpt,
            "body": content,
            "category": category,
            "tags": tags,
            "featured": featured,
            "status": status,
            "scheduled_at": scheduled_at,
            "author_id": author,
        },
        uploads=tuple(_read_uploads("image", image)),
    )


def podcast_form(
    title: str | None = Form(None),
    excerpt: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    tags: str | None = Form(None),
    featured: str | None = Form(None),
    duration: str | None = Form(None),
    status: str | None = Form(None),
    scheduled_at: str | None = Form(None, alias="scheduledAt"),
    author: str | None = Form(None),
    image: list[UploadFile] | None = File(None),
    audio: list[UploadFile] | None = File(None),
) -> ContentForm:
    return ContentForm(
        fields={
            "title": title,
            "excerpt": excerpt,
            "body": description,
            "category": category,
            "tags": tags,
            "featured": featured,
            "duration": duration,
            "status": status,
            "scheduled_at": scheduled_at,
            "author_id": author,
        },
        uploads=tuple(_read_uploads("image", image) + _read_uploads("audio", audio)),
    )


def _parse(form: ContentForm) -> ContentFields:
    try:
        return normalize_fields(form.fields)
    except FieldError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


def build_router(
    kind: ContentKind,
    form_dependency: Callable[..., ContentForm],
) -> APIRouter:
    router = APIRouter()
    label = KIND_LABELS[kind]
    response_model: type[BlogResponse] | type[PodcastResponse] = (
        PodcastResponse if kind == "podcast" else BlogResponse
    )

    @router.get("", response_model=ContentListResponse)
    def list_content(
        status: ContentStatus | Literal["all"] | None = None,
        search: str | None = None,
        sort: SortKey = Query("newest", alias="sortBy"),
        limit: int | None = None,
        offset: int = 0,
        viewer: Identity | None = Depends(get_optional_identity),
        repo: SQLiteContentRepo = Depends(get_content_repo),
        rules: Rules = Depends(get_rules),
        rules_adapter: RulesAdapter = Depends(get_rules_adapter),
    ) -> ContentListResponse:
        """List items. status=published is public; anything else needs admin."""
        result = run_list(
            ListContentInput(
                kind=kind,
                status=None if status == "all" else status,
                search=search,
                sort=sort,
                limit=limit if limit is not None else rules.content.default_page_size,
                offset=offset,
                viewer=viewer,
            ),
            repo=repo,
            rules=rules_adapter,
        )
        if not result.success:
            raise_for(result.errors)

        return ContentListResponse(
            items=[to_response(item) for item in result.items],
            total=result.total,
            limit=result.limit,
            offset=result.offset,
        )

    @router.get("/{item_id}", response_model=response_model)
    def get_content(
        item_id: str,
        viewer: Identity | None = Depends(get_optional_identity),
        repo: SQLiteContentRepo = Depends(get_content_repo),
    ) -> BlogResponse | PodcastResponse:
        """Get one item and count the view."""
        content_id = parse_uuid(item_id, NOT_FOUND_MESSAGES[kind])
        result = run_get(
            GetContentInput(kind=kind, content_id=content_id, viewer=viewer), repo=repo
        )
        if not result.success or not result.content:
            raise_for(result.errors)
        return to_response(result.content)

    @router.post("", response_model=response_model, status_code=201)
    def create_content(
        form: ContentForm = Depends(form_dependency),
        actor: Identity = Depends(get_current_identity),
        repo: SQLiteContentRepo = Depends(get_content_repo),
        users: SQLiteUserRepo = Depends(get_user_repo),
        activity: SQLiteActivityRepo = Depends(get_activity_repo),
        store: FileSystemStore = Depends(get_file_store),
        rules: RulesAdapter = Depends(get_rules_adapter),
        time: SystemClock = Depends(get_clock),
    ) -> BlogResponse | PodcastResponse:
        fields = _parse(form)
        result = run_create(
            CreateContentInput(kind=kind, fields=fields, actor=actor, uploads=form.uploads),
            repo=repo,
            users=users,
            activity=activity,
            store=store,
            rules=rules,
            time=time,
        )
        if not result.success or not result.content:
            raise_for(result.errors)
        logger.info("%s created: %s by %s", label, result.content.id, actor.user_id)
        return to_response(result.content)

    @router.put("/{item_id}", response_model=response_model)
    def update_content(
        item_id: str,
        form: ContentForm = Depends(form_dependency),
        actor: Identity = Depends(get_current_identity),
        repo: SQLiteContentRepo = Depends(get_content_repo),
        users: SQLiteUserRepo = Depends(get_user_repo),
        activity: SQLiteActivityRepo = Depends(get_activity_repo),
        store: FileSystemStore = Depends(get_file_store),
        rules: RulesAdapter = Depends(get_rules_adapter),
        time: SystemClock = Depends(get_clock),
    ) -> BlogResponse | PodcastResponse:
        content_id = parse_uuid(item_id, NOT_FOUND_MESSAGES[kind])
        fields = _parse(form)
        result = run_update(
            UpdateContentInput(
                kind=kind,
                content_id=content_id,
                fields=fields,
                actor=actor,
                uploads=form.uploads,
            ),
            repo=repo,
            users=users,
            activity=activity,
            store=store,
            rules=rules,
            time=time,
        )
        if not result.success or not result.content:
            raise_for(result.errors)
        return to_response(result.content)

    @router.delete("/{item_id}", response_model=DeleteResponse)
    def delete_content(
        item_id: str,
        actor: Identity = Depends(get_current_identity),
        repo: SQLiteContentRepo = Depends(get_content_repo),
        activity: SQLiteActivityRepo = Depends(get_activity_repo),
        store: FileSystemStore = Depends(get_file_store),
        time: SystemClock = Depends(get_clock),
    ) -> DeleteResponse:
        content_id = parse_uuid(item_id, NOT_FOUND_MESSAGES[kind])
        result = run_delete(
            DeleteContentInput(kind=kind, content_id=content_id, actor=actor),
            repo=repo,
            activity=activity,
            store=store,
            time=time,
        )
        if not result.success:
            raise_for(result.errors)
        return DeleteResponse(id=content_id, message=f"{label} deleted")

    return router


blogs_router = build_router("blog", blog_form)
podcasts_router = build_router("podcast", podcast_form)
