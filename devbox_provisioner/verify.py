from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .lib.accounts import read_passwd_entry, supplementary_groups
from .lib.dpkg_status import missing_packages
from .recipe import Recipe

logger = logging.getLogger(__name__)


@dataclass
class VerifyReport:
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def verify_environment(target_root: str, recipe: Recipe) -> VerifyReport:
    """Check a provisioned root against the recipe without running anything in it."""

    report = VerifyReport()

    for pkg in missing_packages(target_root, recipe.packages):
        report.problems.append(f"package not installed: {pkg}")

    username = recipe.username
    entry = read_passwd_entry(target_root, username)
    if entry is None:
        report.problems.append(f"user missing: {username}")
    else:
        if entry.shell != recipe.user_shell:
            report.problems.append(f"user {username} shell is {entry.shell}, expected {recipe.user_shell}")
        if recipe.create_home:
            home = Path(target_root) / entry.home.lstrip(os.sep)
            if not home.is_dir():
                report.problems.append(f"user {username} home missing: {entry.home}")

        groups = set(supplementary_groups(target_root, username))
        wanted = set(recipe.user_groups)
        if groups != wanted:
            report.problems.append(
                f"user {username} groups are {sorted(groups)}, expected {sorted(wanted)}"
            )

    for p in report.problems:
        logger.warning("verify: %s", p)
    if report.ok:
        logger.info("verify: %s matches recipe", target_root)
    return report
