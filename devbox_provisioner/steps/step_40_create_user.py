from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.accounts import useradd
from ..state_store import record_decision
from ._context import step_context

logger = logging.getLogger(__name__)


class CreateUserStep:
    step_id = "40_create_user"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx = step_context(state)
        recipe = ctx.recipe
        username = recipe.username
        if not username:
            raise RuntimeError("recipe.user.name missing")

        # No existence check: useradd refuses an existing user and that ends the run.
        useradd(
            ctx.target_root,
            username,
            groups=recipe.user_groups,
            shell=recipe.user_shell,
            create_home=recipe.create_home,
            dry_run=ctx.dry_run,
        )

        record_decision(
            state,
            "user",
            {"name": username, "groups": recipe.user_groups, "shell": recipe.user_shell},
        )
        logger.info("Created user %s groups=%s shell=%s", username, ",".join(recipe.user_groups), recipe.user_shell)
        return state
