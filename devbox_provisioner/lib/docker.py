from __future__ import annotations

import logging
from typing import Mapping

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def docker_build(
    dockerfile_text: str,
    *,
    tag: str,
    build_args: Mapping[str, str] | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Build an image from a Dockerfile passed on stdin (no build context)."""

    argv = ["docker", "build", "-t", tag]
    for k, v in sorted((build_args or {}).items()):
        argv += ["--build-arg", f"{k}={v}"]
    argv.append("-")
    return run_cmd(argv, input_text=dockerfile_text, dry_run=dry_run)
