from __future__ import annotations

import shlex
import textwrap
from typing import List

from .recipe import Recipe

CONTINUATION = " \\\n     "

# Package rows wrap at this many columns, continuation indent excluded.
PACKAGE_ROW_WIDTH = 50


def _arg_line(key: str, value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'ARG {key}="{escaped}"'


def _install_run(recipe: Recipe) -> str:
    flags = "-y install" if recipe.install_recommends else "-y install --no-install-recommends"
    head = f"RUN apt-get update && export DEBIAN_FRONTEND=noninteractive{CONTINUATION}&& apt-get {flags}"

    pkgs = " ".join(shlex.quote(p) for p in recipe.packages)
    rows = textwrap.wrap(pkgs, width=PACKAGE_ROW_WIDTH, break_on_hyphens=False, break_long_words=False)
    return head + CONTINUATION + CONTINUATION.join(rows)


def _useradd_run(recipe: Recipe) -> str:
    argv = ["useradd"]
    if recipe.create_home:
        argv.append("-m")
    if recipe.user_groups:
        argv += ["-G", ",".join(recipe.user_groups)]
    argv += ["-s", recipe.user_shell, recipe.username]
    return "RUN " + " ".join(shlex.quote(a) for a in argv)


def render_dockerfile(recipe: Recipe) -> str:
    """Render the recipe as a Dockerfile, one RUN per provisioning step.

    Build args are declared ahead of FROM, so nothing after FROM sees them.
    The default recipe renders the devcontainer Dockerfile byte for byte,
    which ends without a trailing newline.
    """

    lines: List[str] = [_arg_line(k, v) for k, v in recipe.build_args.items()]
    lines.append(f"FROM {recipe.base_ref}")
    lines.append("")
    lines.append(_install_run(recipe))
    lines.append("")
    if recipe.refresh_trust_store:
        lines.append("RUN update-ca-certificates")
    lines.append(_useradd_run(recipe))
    return "\n".join(lines)
