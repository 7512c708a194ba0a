"""
Content component - Blog post and podcast episode operations.

Orchestrates the lifecycle, attachments, media and activity components for
the operations exposed to callers:

- run_create: validate, stage uploads, save, log one activity record
- run_update: validate, stage uploads, save, drop replaced files, log
- run_delete: delete record, release owned files, log
- run_get: single read that counts a view
- run_list: filtered listing; "published" is public, anything else admin-only

Guards:
- G1: every mutation requires an admin Identity passed in explicitly
- G2: validation runs before any file is written where it can
- G3: any failure after files were written removes them before returning
- G4: at most one activity record per successful request
"""

from __future__ import annotations

import logging

from cms.components.activity import LogActivityInput, run_log
from cms.components.attachments import (
    AttachmentError,
    FileStorePort,
    StoreAttachmentsInput,
    run_store,
    validate_uploads,
)
from cms.components.lifecycle import (
    LifecycleError,
    ResolveStatusInput,
    describe_create,
    describe_delete,
    describe_update,
    run_resolve,
)
from cms.components.media import guarded, plan_replacement, run_commit, run_release
from cms.domain.entities import (
    CATEGORIES,
    ContentItem,
    ContentKind,
    Identity,
)
from cms.domain.normalize import ContentFields
from cms.ports.repo import ContentQuery

from .models import (
    ContentListOutput,
    ContentOperationOutput,
    ContentValidationError,
    CreateContentInput,
    DeleteContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
)
from .ports import (
    ActivityRepoPort,
    ContentRepoPort,
    RulesPort,
    TimePort,
    UserRepoPort,
)

logger = logging.getLogger(__name__)

BODY_LABELS: dict[ContentKind, str] = {"blog": "Content", "podcast": "Description"}
NOT_FOUND_MESSAGES: dict[ContentKind, str] = {
    "blog": "Blog post not found",
    "podcast": "Podcast episode not found",
}


# --- Helpers ---


def _failure(*errors: ContentValidationError) -> ContentOperationOutput:
    return ContentOperationOutput(content=None, errors=list(errors), success=False)


def _not_found(kind: ContentKind) -> ContentOperationOutput:
    return _failure(ContentValidationError(code="not_found", message=NOT_FOUND_MESSAGES[kind]))


def _from_lifecycle(errors: list[LifecycleError]) -> list[ContentValidationError]:
    return [ContentValidationError(code=e.code, message=e.message, field=e.field) for e in errors]


def _from_attachments(errors: list[AttachmentError]) -> list[ContentValidationError]:
    return [ContentValidationError(code=e.code, message=e.message, field=e.field) for e in errors]


def _check_admin(actor: Identity | None) -> list[ContentValidationError]:
    if actor is None:
        return [ContentValidationError(code="unauthorized", message="Not authorized, no token")]
    if not actor.is_admin:
        return [
            ContentValidationError(
                code="forbidden", message="Not authorized, admin access required"
            )
        ]
    return []


def _validate_category(kind: ContentKind, category: str | None) -> list[ContentValidationError]:
    if category is None or category in CATEGORIES[kind]:
        return []
    return [
        ContentValidationError(
            code="invalid_category",
            message=f"Category '{category}' is not valid for {kind}",
            field="category",
        )
    ]


def _validate_author(fields: ContentFields, users: UserRepoPort) -> list[ContentValidationError]:
    if fields.author_id is None or users.get_by_id(fields.author_id) is not None:
        return []
    return [
        ContentValidationError(
            code="author_not_found",
            message="Author does not refer to an existing user",
            field="author",
        )
    ]


def _validate_unique_title(
    kind: ContentKind,
    title: str | None,
    repo: ContentRepoPort,
    own_id: object = None,
) -> list[ContentValidationError]:
    # Podcast titles are unique, case-insensitively
    if kind != "podcast" or not title:
        return []
    existing = repo.find_by_title(kind, title)
    if existing is None or existing.id == own_id:
        return []
    return [
        ContentValidationError(
            code="title_exists",
            message="A podcast with this title already exists. Please choose a different title.",
            field="title",
        )
    ]


def _log(
    activity: ActivityRepoPort,
    time: TimePort,
    *,
    action: str,
    actor: str,
    item: ContentItem,
) -> None:
    """Append the request's activity record. The mutation already succeeded."""
    try:
        run_log(
            LogActivityInput(
                action=action,
                actor=actor,
                category=item.kind,
                detail=f"{item.kind.capitalize()}: {item.title}",
            ),
            repo=activity,
            time=time,
        )
    except Exception:
        logger.exception("Failed to record activity %r for %s %s", action, item.kind, item.id)


# --- Component Entry Points ---


def run_create(
    inp: CreateContentInput,
    *,
    repo: ContentRepoPort,
    users: UserRepoPort,
    activity: ActivityRepoPort,
    store: FileStorePort,
    rules: RulesPort,
    time: TimePort,
) -> ContentOperationOutput:
    """
    Create a blog post or podcast episode with its media.

    Args:
        inp: Kind, parsed fields, uploads and the acting identity.
        repo: Content repository port.
        users: User repository port (author resolution).
        activity: Activity repository port.
        store: File store port for uploads.
        rules: Rules port for upload constraints.
        time: Time port.

    Returns:
        ContentOperationOutput with the created item or errors. On error no
        uploaded file remains stored.
    """
    denied = _check_admin(inp.actor)
    if denied:
        return _failure(*denied)

    kind = inp.kind
    fields = inp.fields
    now = time.now_utc()

    title, body, author_id = fields.title, fields.body, fields.author_id

    errors: list[ContentValidationError] = []
    if not title:
        errors.append(
            ContentValidationError(code="title_required", message="Title is required", field="title")
        )
    if not body:
        errors.append(
            ContentValidationError(
                code="body_required",
                message=f"{BODY_LABELS[kind]} is required",
                field="body",
            )
        )
    if author_id is None:
        errors.append(
            ContentValidationError(
                code="author_required", message="Author is required", field="author"
            )
        )
    if not title or not body or author_id is None:
        return _failure(*errors)

    errors.extend(_validate_category(kind, fields.category))
    errors.extend(_validate_author(fields, users))
    errors.extend(_validate_unique_title(kind, title, repo))

    resolved = run_resolve(
        ResolveStatusInput(
            current_status=None,
            current_scheduled_at=None,
            requested_status=fields.status,
            requested_scheduled_at=fields.scheduled_at,
            now_utc=now,
        )
    )
    errors.extend(_from_lifecycle(resolved.errors))

    upload_rules = rules.get_upload_rules(kind)
    errors.extend(_from_attachments(validate_uploads(inp.uploads, upload_rules)))
    if errors:
        return _failure(*errors)

    stored = run_store(
        StoreAttachmentsInput(uploads=inp.uploads, rules=upload_rules),
        store=store,
    )
    if not stored.success:
        return _failure(*_from_attachments(stored.errors))

    plan = plan_replacement({}, stored.refs)

    with guarded(plan, store=store):
        item = ContentItem(
            kind=kind,
            title=title,
            excerpt=fields.excerpt or "",
            body=body,
            category=fields.category or "",
            tags=fields.tags or [],
            featured=bool(fields.featured),
            duration=(fields.duration or "") if kind == "podcast" else "",
            media=plan.media,
            status=resolved.status or "draft",
            scheduled_at=resolved.scheduled_at,
            author_id=author_id,
            views=0,
            created_at=now,
            updated_at=now,
        )
        saved = repo.save(item)

    _log(
        activity,
        time,
        action=describe_create(kind, saved.status),
        actor=inp.actor.name,
        item=saved,
    )
    return ContentOperationOutput(content=saved, errors=[], success=True)


def run_update(
    inp: UpdateContentInput,
    *,
    repo: ContentRepoPort,
    users: UserRepoPort,
    activity: ActivityRepoPort,
    store: FileStorePort,
    rules: RulesPort,
    time: TimePort,
) -> ContentOperationOutput:
    """
    Update an item's fields, status and media.

    New uploads replace the old files only once the update is saved; the old
    files are removed after that. If anything fails, the new files are
    removed and the stored item and its files are untouched.
    """
    denied = _check_admin(inp.actor)
    if denied:
        return _failure(*denied)

    kind = inp.kind
    fields = inp.fields
    now = time.now_utc()

    current = repo.get_by_id(inp.content_id)
    if current is None or current.kind != kind:
        return _not_found(kind)

    errors: list[ContentValidationError] = []
    errors.extend(_validate_category(kind, fields.category))
    errors.extend(_validate_author(fields, users))
    if fields.title and fields.title.lower() != current.title.lower():
        errors.extend(_validate_unique_title(kind, fields.title, repo, own_id=current.id))

    resolved = run_resolve(
        ResolveStatusInput(
            current_status=current.status,
            current_scheduled_at=current.scheduled_at,
            requested_status=fields.status,
            requested_scheduled_at=fields.scheduled_at,
            now_utc=now,
        )
    )
    errors.extend(_from_lifecycle(resolved.errors))

    upload_rules = rules.get_upload_rules(kind)
    errors.extend(_from_attachments(validate_uploads(inp.uploads, upload_rules)))
    if errors:
        return _failure(*errors)

    stored = run_store(
        StoreAttachmentsInput(uploads=inp.uploads, rules=upload_rules),
        store=store,
    )
    if not stored.success:
        return _failure(*_from_attachments(stored.errors))

    plan = plan_replacement(current.media, stored.refs)

    with guarded(plan, store=store):
        changes = fields.model_dump(
            exclude_none=True,
            include={"title", "excerpt", "body", "category", "tags", "featured", "author_id"},
        )
        if kind == "podcast" and fields.duration is not None:
            changes["duration"] = fields.duration
        changes.update(
            media=plan.media,
            status=resolved.status,
            scheduled_at=resolved.scheduled_at,
            updated_at=now,
        )
        updated = current.model_copy(update=changes)
        saved = repo.save(updated)
    run_commit(plan, store=store)

    rescheduled = (
        resolved.status == "scheduled" and resolved.scheduled_at != current.scheduled_at
    )
    _log(
        activity,
        time,
        action=describe_update(kind, current.status, saved.status, rescheduled),
        actor=inp.actor.name,
        item=saved,
    )
    return ContentOperationOutput(content=saved, errors=[], success=True)


def run_delete(
    inp: DeleteContentInput,
    *,
    repo: ContentRepoPort,
    activity: ActivityRepoPort,
    store: FileStorePort,
    time: TimePort,
) -> ContentOperationOutput:
    """
    Delete an item and every file it owns.

    File removal is best-effort and never undoes or fails the delete.
    """
    denied = _check_admin(inp.actor)
    if denied:
        return _failure(*denied)

    current = repo.get_by_id(inp.content_id)
    if current is None or current.kind != inp.kind:
        return _not_found(inp.kind)

    if not repo.delete(current.id):
        # Removed concurrently
        return _not_found(inp.kind)

    run_release(current, store=store)

    _log(
        activity,
        time,
        action=describe_delete(inp.kind),
        actor=inp.actor.name,
        item=current,
    )
    return ContentOperationOutput(content=current, errors=[], success=True)


def run_get(
    inp: GetContentInput,
    *,
    repo: ContentRepoPort,
) -> ContentOperationOutput:
    """
    Read one item and count the view.

    Unpublished items are only visible to admins; everyone else gets
    not_found so their existence is not revealed.
    """
    item = repo.get_by_id(inp.content_id)
    if item is None or item.kind != inp.kind:
        return _not_found(inp.kind)

    if item.status != "published" and (inp.viewer is None or not inp.viewer.is_admin):
        return _not_found(inp.kind)

    repo.increment_views(item.id)
    return ContentOperationOutput(
        content=item.model_copy(update={"views": item.views + 1}),
        errors=[],
        success=True,
    )


def run_list(
    inp: ListContentInput,
    *,
    repo: ContentRepoPort,
    rules: RulesPort | None = None,
) -> ContentListOutput:
    """
    List items of one kind.

    status "published" needs no identity; any other filter (including no
    filter) requires an admin viewer.
    """
    if inp.status != "published":
        denied = _check_admin(inp.viewer)
        if denied:
            return ContentListOutput(
                items=[], total=0, limit=inp.limit, offset=inp.offset, errors=denied, success=False
            )

    max_page = rules.get_max_page_size() if rules else 200
    query = ContentQuery(
        kind=inp.kind,
        status=inp.status,
        search=inp.search.strip() if inp.search and inp.search.strip() else None,
        sort=inp.sort,
        limit=max(1, min(inp.limit, max_page)),
        offset=max(0, inp.offset),
    )
    items = repo.list(query)
    total = repo.count(query)

    return ContentListOutput(
        items=items,
        total=total,
        limit=query.limit,
        offset=query.offset,
        errors=[],
        success=True,
    )
