from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/"
    state_default: str = "/var/lib/devbox-provisioner/state.json"
    log_default: str = "/var/log/devbox-provisioner.log"


PATHS = Paths()
