from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_binds
from ..lib.pkg import apt_install, apt_update
from ..state_store import record_decision
from ._context import step_context

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "20_install_packages"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx = step_context(state)
        packages = ctx.recipe.packages
        if not packages:
            raise RuntimeError("recipe.packages is empty")

        with chroot_binds(ctx.target_root, dry_run=ctx.dry_run):
            apt_update(ctx.target_root, dry_run=ctx.dry_run)
            # One transaction: a bad name fails the whole set.
            apt_install(
                ctx.target_root,
                packages,
                with_recommends=ctx.recipe.install_recommends,
                dry_run=ctx.dry_run,
            )

        record_decision(state, "packages", sorted(packages))
        return state
