"""Save and reload the workspace as a single JSON document."""

import json
import logging
from typing import Any, Dict, Union

from pydantic import ValidationError

from thesislens.exceptions import InvalidWorkspaceError
from thesislens.schemas.workspace import WorkspaceSnapshot

logger = logging.getLogger(__name__)


def dump_snapshot(snapshot: WorkspaceSnapshot) -> str:
    return snapshot.model_dump_json(by_alias=True, indent=2)


def parse_snapshot(raw: Union[bytes, str, Dict[str, Any]]) -> WorkspaceSnapshot:
    """Validate a saved workspace.

    Raises:
        InvalidWorkspaceError: not JSON, no `articles` key, or malformed records
    """
    if isinstance(raw, (bytes, str)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidWorkspaceError(f"Failed to load project file: {e}") from e
    else:
        data = raw

    if not isinstance(data, dict) or data.get("articles") is None:
        raise InvalidWorkspaceError("Invalid project file format: 'articles' is missing")

    # Missing or null optional keys take their defaults
    data = {k: v for k, v in data.items() if v is not None or k in ("compReport", "synthReport")}
    try:
        snapshot = WorkspaceSnapshot.model_validate(data)
    except ValidationError as e:
        logger.warning("Workspace file failed validation: %s", e)
        raise InvalidWorkspaceError(f"Invalid project file format: {e.error_count()} invalid fields") from e

    logger.info(f"Loaded workspace with {len(snapshot.articles)} articles")
    return snapshot
