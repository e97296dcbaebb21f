from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..recipe import Recipe


@dataclass(frozen=True)
class StepContext:
    recipe: Recipe
    target_root: str
    dry_run: bool


def step_context(state: Dict[str, Any]) -> StepContext:
    cfg = state.get("config") or {}
    target_root = cfg.get("target_root")
    if not target_root:
        raise RuntimeError("config.target_root missing")
    return StepContext(
        recipe=Recipe(raw=state.get("recipe") or {}),
        target_root=str(target_root),
        dry_run=bool(cfg.get("dry_run", False)),
    )
