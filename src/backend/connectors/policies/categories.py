from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pydantic import BaseModel, ValidationError

from .loader import PolicyFileError


class CategoryInfo(BaseModel):
    id: str
    label: str


def load_categories(path: Path) -> List[CategoryInfo]:
    with Path(path).open(encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, list):
        raise PolicyFileError(Path(path).name, "categories.json must be an array")
    try:
        return [CategoryInfo.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise PolicyFileError(Path(path).name, str(exc)) from exc
