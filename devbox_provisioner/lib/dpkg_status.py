from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Set

DPKG_STATUS_REL = "var/lib/dpkg/status"


def _stanzas(text: str) -> Iterable[Dict[str, str]]:
    current: Dict[str, str] = {}
    last_key = None
    for line in text.splitlines():
        if not line.strip():
            if current:
                yield current
            current = {}
            last_key = None
            continue
        if line[0] in " \t":
            # continuation of a multi-line field
            if last_key is not None:
                current[last_key] += "\n" + line.strip()
            continue
        key, _, value = line.partition(":")
        last_key = key.strip()
        current[last_key] = value.strip()
    if current:
        yield current


def installed_packages(target_root: str) -> Set[str]:
    """Return package names dpkg reports as 'install ok installed' in target root."""

    p = Path(target_root) / DPKG_STATUS_REL
    if not p.exists():
        return set()

    out: Set[str] = set()
    for st in _stanzas(p.read_text(encoding="utf-8", errors="replace")):
        name = st.get("Package")
        if name and st.get("Status") == "install ok installed":
            out.add(name)
    return out


def missing_packages(target_root: str, packages: Iterable[str]) -> List[str]:
    have = installed_packages(target_root)
    return [p for p in packages if p not in have]
