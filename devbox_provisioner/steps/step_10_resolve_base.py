from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.os_release import read_os_release
from ..state_store import record_decision
from ._context import step_context

logger = logging.getLogger(__name__)


class ResolveBaseStep:
    """Confirm the target root is the base image the recipe names.

    An unpinned tag accepts any release of the named distribution.
    """

    step_id = "10_resolve_base"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx = step_context(state)
        recipe = ctx.recipe

        try:
            osr = read_os_release(ctx.target_root)
        except FileNotFoundError as e:
            raise RuntimeError(f"Cannot resolve base {recipe.base_ref}: no os-release under {ctx.target_root}") from e

        distro = osr.get("ID", "")
        if distro != recipe.base_image:
            raise RuntimeError(f"Base mismatch: recipe wants {recipe.base_image}, target root is {distro or 'unknown'}")

        tag = recipe.base_tag
        if tag and tag != "latest" and tag not in {osr.get("VERSION_CODENAME"), osr.get("VERSION_ID")}:
            raise RuntimeError(
                f"Base tag mismatch: recipe pins {recipe.base_ref}, target root is "
                f"{osr.get('VERSION_CODENAME') or osr.get('VERSION_ID') or 'unknown'}"
            )

        resolved = {
            "ref": recipe.base_ref,
            "id": distro,
            "version_id": osr.get("VERSION_ID"),
            "version_codename": osr.get("VERSION_CODENAME"),
        }
        record_decision(state, "base", resolved)

        logger.info("Resolved base %s -> %s %s", recipe.base_ref, distro, osr.get("VERSION_ID") or "")
        return state
