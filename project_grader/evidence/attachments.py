"""Normalization of uploaded attachments and external links into content parts."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from project_grader.libs.content import ContentPart, InlineBinaryPart, TextPart

if TYPE_CHECKING:
    from project_grader.grading.models import FileAttachment


def to_binary_part(attachment: FileAttachment) -> InlineBinaryPart:
    """Strip any data-URI header and carry the MIME type alongside the payload."""
    return InlineBinaryPart(data=attachment.payload(), mime_type=attachment.mime_type)


def attachment_parts(attachment: FileAttachment, marker: str) -> List[ContentPart]:
    """The binary payload followed by a text marker explaining what it is."""
    return [to_binary_part(attachment), TextPart(marker.format(name=attachment.name))]


def normalize_link(link: Optional[str]) -> Optional[str]:
    """Return a trimmed link, or None for blank values."""
    if link is None:
        return None
    link = link.strip()
    return link or None
