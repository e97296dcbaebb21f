from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_binds
from ..lib.dpkg_status import missing_packages
from ..lib.trust import update_ca_certificates
from ..state_store import record_decision
from ._context import step_context

logger = logging.getLogger(__name__)


class RefreshTrustStoreStep:
    step_id = "30_refresh_trust_store"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx = step_context(state)
        if not ctx.recipe.refresh_trust_store:
            logger.info("Trust store refresh disabled by recipe")
            record_decision(state, "trust_store_refreshed", False)
            return state

        # Certificates must be on disk before they can be trusted.
        if not ctx.dry_run:
            missing = missing_packages(ctx.target_root, ctx.recipe.trust_store_requires)
            if missing:
                raise RuntimeError(f"Certificate packages not installed: {', '.join(missing)}")

        with chroot_binds(ctx.target_root, dry_run=ctx.dry_run):
            update_ca_certificates(ctx.target_root, dry_run=ctx.dry_run)

        record_decision(state, "trust_store_refreshed", True)
        return state
