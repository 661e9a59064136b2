"""Content parts sent to the reasoning engine.

A compiled prompt is an ordered list of parts. Each part is either text or an
inline binary payload (PDF, image, ...) carried as base64 with its MIME type.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Literal, Union


@dataclass(frozen=True)
class TextPart:
    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class InlineBinaryPart:
    """Base64 payload (without any data-URI header) plus its MIME type."""

    data: str
    mime_type: str
    kind: Literal["binary"] = "binary"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


ContentPart = Union[TextPart, InlineBinaryPart]
