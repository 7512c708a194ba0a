from cms.components.attachments import AttachmentRule
from cms.domain.entities import ContentKind
from cms.rules.models import Rules


class RulesAdapter:
    """Maps loaded Rules onto the content component's RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules

    def get_upload_rules(self, kind: ContentKind) -> dict[str, AttachmentRule]:
        fields = getattr(self._rules.uploads, kind)
        return {
            name: AttachmentRule(
                max_bytes=r.max_bytes,
                mime_types=tuple(r.mime_types),
                extensions=tuple(r.extensions),
                max_files=r.max_files,
            )
            for name, r in fields.items()
        }

    def get_max_page_size(self) -> int:
        return self._rules.content.max_page_size
