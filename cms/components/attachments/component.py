"""
Attachments component - Validated storage and best-effort removal of uploads.

Validates every upload of a request against per-field rules before anything
is written, then stores them one by one. A request either ends with all of
its files stored or with none of them left behind.

Invariants:
- I1: Unknown fields and files over the per-field count are rejected
- I2: MIME type and extension must both be allowlisted for the field
- I3: Size must not exceed the field limit
- I4: A failed batch leaves no stored file behind
- I5: Removal never raises; failures are logged
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from .models import (
    AttachmentError,
    AttachmentRule,
    StoreAttachmentsInput,
    StoreOutput,
    Upload,
)
from .ports import FileStorePort

logger = logging.getLogger(__name__)


# --- Validation ---


def _validate_one(upload: Upload, rule: AttachmentRule) -> list[AttachmentError]:
    errors: list[AttachmentError] = []
    name = upload.field

    if len(upload.data) == 0:
        errors.append(
            AttachmentError(code="empty_file", message=f"Uploaded {name} is empty", field=name)
        )

    if len(upload.data) > rule.max_bytes:
        errors.append(
            AttachmentError(
                code="file_too_large",
                message=f"File size exceeds limit for {name} ({rule.max_bytes} bytes)",
                field=name,
            )
        )

    ext = Path(upload.filename).suffix.lower()
    mime = upload.content_type.split(";")[0].strip().lower()
    if ext not in rule.extensions or mime not in rule.mime_types:
        allowed = ", ".join(e.lstrip(".").upper() for e in rule.extensions)
        errors.append(
            AttachmentError(
                code="type_not_allowed",
                message=f"Only {allowed} files are allowed for {name}",
                field=name,
            )
        )

    return errors


def validate_uploads(
    uploads: Iterable[Upload],
    rules: dict[str, AttachmentRule],
) -> list[AttachmentError]:
    """Check every upload against its field rule without storing anything."""
    uploads = list(uploads)
    errors: list[AttachmentError] = []

    for field_name, count in Counter(u.field for u in uploads).items():
        rule = rules.get(field_name)
        if rule is None:
            errors.append(
                AttachmentError(
                    code="unexpected_field",
                    message=f"Unexpected upload field '{field_name}'",
                    field=field_name,
                )
            )
        elif count > rule.max_files:
            errors.append(
                AttachmentError(
                    code="too_many_files",
                    message=f"At most {rule.max_files} file(s) allowed for {field_name}",
                    field=field_name,
                )
            )

    for upload in uploads:
        rule = rules.get(upload.field)
        if rule is not None:
            errors.extend(_validate_one(upload, rule))

    return errors


# --- Component Entry Points ---


def run_store(
    inp: StoreAttachmentsInput,
    *,
    store: FileStorePort,
) -> StoreOutput:
    """
    Store all uploads of one request.

    Args:
        inp: Uploads plus the per-field rules they must satisfy.
        store: File store port.

    Returns:
        StoreOutput with stored keys by field, or errors. On error nothing
        from this batch remains in the store.
    """
    errors = validate_uploads(inp.uploads, inp.rules)
    if errors:
        return StoreOutput(refs={}, errors=errors, success=False)

    refs: dict[str, str] = {}
    for upload in inp.uploads:
        try:
            refs[upload.field] = store.save(upload.filename, upload.data)
        except OSError as e:
            logger.error("Failed to store %s upload %r: %s", upload.field, upload.filename, e)
            run_remove(refs.values(), store=store)
            return StoreOutput(
                refs={},
                errors=[
                    AttachmentError(
                        code="write_failed",
                        message=f"Could not store {upload.field}",
                        field=upload.field,
                    )
                ],
                success=False,
            )
        except BaseException:
            # Cancelled mid-batch: release what was already written
            run_remove(refs.values(), store=store)
            raise

    return StoreOutput(refs=refs, errors=[], success=True)


def run_remove(keys: Iterable[str], *, store: FileStorePort) -> int:
    """
    Best-effort removal of stored files.

    Missing files are ignored; any other failure is logged and swallowed.
    Returns the number of files actually removed.
    """
    removed = 0
    for key in list(keys):
        if not key:
            continue
        try:
            store.delete(key)
            removed += 1
            logger.info("Cleaned up file: %s", key)
        except FileNotFoundError:
            continue
        except (OSError, ValueError) as e:
            logger.warning("Error cleaning up file %s: %s", key, e)
    return removed
