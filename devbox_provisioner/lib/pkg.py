from __future__ import annotations

import logging
from typing import Sequence

from .chroot import target_cmd

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def apt_update(target_root: str, *, dry_run: bool = False) -> None:
    target_cmd(target_root, ["apt-get", "update"], env=APT_ENV, dry_run=dry_run)


def apt_install(
    target_root: str,
    packages: Sequence[str],
    *,
    with_recommends: bool = False,
    dry_run: bool = False,
) -> None:
    if not packages:
        return
    argv = [
        "apt-get",
        "-y",
        "install",
    ]
    if not with_recommends:
        argv.append("--no-install-recommends")
    target_cmd(
        target_root,
        [*argv, *packages],
        env=APT_ENV,
        dry_run=dry_run,
    )
    logger.info("Installed %d package(s) into %s", len(packages), target_root)
