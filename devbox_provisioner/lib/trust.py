from __future__ import annotations

import logging

from .chroot import target_cmd

logger = logging.getLogger(__name__)


def update_ca_certificates(target_root: str, *, dry_run: bool = False) -> None:
    target_cmd(target_root, ["update-ca-certificates"], dry_run=dry_run)
    logger.info("Trust store refreshed in %s", target_root)
