from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .chroot import target_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PasswdEntry:
    name: str
    uid: int
    gid: int
    home: str
    shell: str


def useradd(
    target_root: str,
    username: str,
    *,
    groups: Sequence[str],
    shell: str,
    create_home: bool = True,
    dry_run: bool = False,
) -> None:
    """Create a local user. Fails if the user already exists."""

    argv = ["useradd"]
    if create_home:
        argv.append("-m")
    if groups:
        argv += ["-G", ",".join(groups)]
    argv += ["-s", shell, username]
    target_cmd(target_root, argv, dry_run=dry_run)


def read_passwd_entry(target_root: str, username: str) -> Optional[PasswdEntry]:
    p = Path(target_root) / "etc/passwd"
    if not p.exists():
        return None
    for line in p.read_text(encoding="utf-8").splitlines():
        fields = line.split(":")
        if len(fields) < 7 or fields[0] != username:
            continue
        return PasswdEntry(
            name=fields[0],
            uid=int(fields[2]),
            gid=int(fields[3]),
            home=fields[5],
            shell=fields[6],
        )
    return None


def supplementary_groups(target_root: str, username: str) -> List[str]:
    """Groups listing username as a member in target root's /etc/group."""

    p = Path(target_root) / "etc/group"
    if not p.exists():
        return []
    out: List[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        fields = line.split(":")
        if len(fields) < 4:
            continue
        members = [m for m in fields[3].split(",") if m]
        if username in members:
            out.append(fields[0])
    return out
