"""Read assignment and submission definitions from YAML files."""

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import AssignmentConfig, FileAttachment, StudentSubmission

LOG = logging.getLogger(__name__)

ATTACHMENT_KEYS = ("assignmentFile", "assignment_file", "reportFile", "report_file",
                   "promptLogFile", "prompt_log_file")


def load_attachment(value: Any, base_dir: Path) -> Any:
    """
    Resolve an attachment entry.

    A string is treated as a path (relative to the YAML file) and read into a
    base64 FileAttachment; mappings are passed through for model validation.
    """
    if not isinstance(value, str):
        return value
    path = Path(value)
    if not path.is_absolute():
        path = base_dir / path
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return FileAttachment(name=path.name, data=data, mime_type=mime_type)


def _resolve_attachments(raw: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    resolved = dict(raw)
    for key in ATTACHMENT_KEYS:
        if resolved.get(key) is not None:
            resolved[key] = load_attachment(resolved[key], base_dir)
    return resolved


def _read_yaml(path: Path) -> Any:
    with open(path, "r") as f:
        return yaml.safe_load(f)


def load_assignment(path: Path) -> AssignmentConfig:
    """Load an AssignmentConfig from a YAML mapping."""
    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise TypeError(f"Assignment file {path} must contain a mapping")
    return AssignmentConfig.model_validate(_resolve_attachments(data, path.parent))


def load_submissions(path: Path) -> List[StudentSubmission]:
    """Load submissions from a YAML list (or a mapping with a ``submissions`` list)."""
    data = _read_yaml(path)
    if isinstance(data, dict):
        data = data.get("submissions")
    if not isinstance(data, list):
        raise TypeError(f"Submissions file {path} must contain a list of submissions")
    submissions = [
        StudentSubmission.model_validate(_resolve_attachments(item, path.parent))
        for item in data
    ]
    LOG.info("Loaded %d submissions from %s", len(submissions), path)
    return submissions
