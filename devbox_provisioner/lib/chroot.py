from __future__ import annotations

import contextlib
import logging
import os
from typing import Iterator, List, Mapping, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

# Minimal bind mounts for apt and maintainer scripts, in mount order.
BIND_SOURCES = ("/dev", "/proc", "/sys")


def is_host_root(target_root: str) -> bool:
    return os.path.abspath(target_root) == "/"


def path_in_target(target_root: str, path: str) -> bool:
    """True if path lands inside target root, i.e. inside the image being provisioned."""

    root = os.path.abspath(target_root)
    p = os.path.abspath(path)
    return root == "/" or p == root or p.startswith(root + os.sep)


def target_cmd(
    target_root: str,
    argv: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command inside target root.

    The host root runs the command directly, as an image build does.
    """

    if is_host_root(target_root):
        return run_cmd(list(argv), env=env, check=check, dry_run=dry_run)
    return run_cmd(["chroot", target_root, *argv], env=env, check=check, dry_run=dry_run)


@contextlib.contextmanager
def chroot_binds(target_root: str, *, dry_run: bool = False) -> Iterator[None]:
    """Bind-mount host pseudo filesystems for the duration of the block.

    Only mounts that succeeded are released, in reverse order, whether the
    block or a later mount fails. No-op on the host root.
    """

    if is_host_root(target_root):
        yield
        return

    mounted: List[str] = []
    try:
        for src in BIND_SOURCES:
            dst = f"{target_root}{src}"
            run_cmd(["mount", "--bind", src, dst], dry_run=dry_run)
            mounted.append(dst)
        yield
    finally:
        for dst in reversed(mounted):
            run_cmd(["umount", "-lf", dst], check=False, dry_run=dry_run)
