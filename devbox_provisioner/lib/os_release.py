from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict


def read_os_release(target_root: str) -> Dict[str, str]:
    """Parse os-release(5) from target root.

    /etc/os-release wins over /usr/lib/os-release. Missing files raise FileNotFoundError.
    """

    root = Path(target_root)
    for rel in ("etc/os-release", "usr/lib/os-release"):
        p = root / rel
        if p.exists():
            break
    else:
        raise FileNotFoundError(str(root / "etc/os-release"))

    data: Dict[str, str] = {}
    for line in p.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        parts = shlex.split(value) if value else []
        data[key.strip()] = parts[0] if parts else ""
    return data
