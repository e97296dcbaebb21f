from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Set

import pytest

OS_RELEASE = """\
PRETTY_NAME="Ubuntu 22.10"
NAME="Ubuntu"
VERSION_ID="22.10"
VERSION="22.10 (Kinetic Kudu)"
VERSION_CODENAME=kinetic
ID=ubuntu
ID_LIKE=debian
"""

PASSWD = "root:x:0:0:root:/root:/bin/bash\nsyslog:x:104:110::/home/syslog:/usr/sbin/nologin\n"
GROUP = "root:x:0:\nadm:x:4:syslog\nusers:x:100:\nsudo:x:27:\n"


class FakeSystem:
    """Stand-in for subprocess.run that models apt, dpkg and useradd against a root dir."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.network = True
        self.unknown_packages: Set[str] = set()
        self.failing_mounts: Set[str] = set()
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self.stdin: List[Optional[str]] = []
        self._next_uid = 1000

    # -- helpers used by tests
    def commands(self) -> List[List[str]]:
        """Calls with the chroot prefix removed and mounts dropped."""
        out = []
        for argv in self.calls:
            if argv[:2] == ["chroot", str(self.root)]:
                argv = argv[2:]
            if argv and argv[0] in {"mount", "umount"}:
                continue
            out.append(argv)
        return out

    def tools(self) -> List[str]:
        return [c[0] for c in self.commands()]

    # -- subprocess.run replacement
    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(kwargs.get("env"))
        self.stdin.append(kwargs.get("input"))

        cmd = argv
        if cmd[:2] == ["chroot", str(self.root)]:
            cmd = cmd[2:]

        handler = {
            "apt-get": self._apt_get,
            "mount": self._mount,
            "useradd": self._useradd,
        }.get(cmd[0])
        if handler is None:
            return subprocess.CompletedProcess(argv, 0, "", "")
        rc, err = handler(cmd)
        return subprocess.CompletedProcess(argv, rc, "", err)

    def _mount(self, cmd):
        if cmd[1:2] == ["--bind"] and cmd[2] in self.failing_mounts:
            return 32, f"mount: {cmd[3]}: mount point does not exist."
        return 0, ""

    def _apt_get(self, cmd):
        if not self.network:
            return 100, "E: Temporary failure resolving 'archive.ubuntu.com'"
        if "install" not in cmd:
            return 0, ""
        pkgs = [a for a in cmd[cmd.index("install") + 1 :] if not a.startswith("-")]
        bad = [p for p in pkgs if p in self.unknown_packages]
        if bad:
            return 100, f"E: Unable to locate package {bad[0]}"
        status = self.root / "var/lib/dpkg/status"
        with status.open("a", encoding="utf-8") as f:
            for p in pkgs:
                f.write(f"Package: {p}\nStatus: install ok installed\nVersion: 1.0\n\n")
        return 0, ""

    def _useradd(self, cmd):
        name = cmd[-1]
        groups: List[str] = []
        shell = "/bin/sh"
        home = "-m" in cmd
        if "-G" in cmd:
            groups = cmd[cmd.index("-G") + 1].split(",")
        if "-s" in cmd:
            shell = cmd[cmd.index("-s") + 1]

        passwd = self.root / "etc/passwd"
        if any(line.split(":")[0] == name for line in passwd.read_text().splitlines()):
            return 9, f"useradd: user '{name}' already exists"

        uid = self._next_uid
        self._next_uid += 1
        with passwd.open("a") as f:
            f.write(f"{name}:x:{uid}:{uid}::/home/{name}:{shell}\n")

        group_file = self.root / "etc/group"
        lines = []
        for line in group_file.read_text().splitlines():
            fields = line.split(":")
            if fields[0] in groups:
                members = [m for m in fields[3].split(",") if m] + [name]
                fields[3] = ",".join(members)
            lines.append(":".join(fields))
        lines.append(f"{name}:x:{uid}:")
        group_file.write_text("\n".join(lines) + "\n")

        if home:
            (self.root / "home" / name).mkdir(parents=True, exist_ok=True)
        return 0, ""


def make_root(root: Path) -> Path:
    """Lay out a minimal Ubuntu root: os-release, accounts, empty dpkg database."""
    (root / "etc").mkdir(parents=True)
    (root / "var/lib/dpkg").mkdir(parents=True)
    (root / "etc/os-release").write_text(OS_RELEASE)
    (root / "etc/passwd").write_text(PASSWD)
    (root / "etc/group").write_text(GROUP)
    (root / "var/lib/dpkg/status").write_text("")
    return root


@pytest.fixture
def target_root(tmp_path: Path) -> Path:
    return make_root(tmp_path / "rootfs")


@pytest.fixture
def fake_system(target_root: Path, monkeypatch) -> FakeSystem:
    fake = FakeSystem(target_root)
    monkeypatch.setattr("devbox_provisioner.lib.command.subprocess.run", fake)
    return fake


@pytest.fixture
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("devbox_provisioner")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
