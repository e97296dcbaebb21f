from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import RecipeError

DEFAULT_PACKAGES = [
    "curl",
    "lld",
    "lldb",
    "clangd",
    "clang",
    "build-essential",
    "git",
    "ca-certificates",
    "pkg-config",
    "btop",
    "udev",
    "libudev-dev",
    "libasound2-dev",
    "aria2",
]

DEFAULT_RECIPE: Dict[str, Any] = {
    # VARIANT is declared for parity with the devcontainer definition; no step reads it.
    "build_args": {"VARIANT": "kinetic"},
    "base": {"image": "ubuntu", "tag": None},
    "packages": list(DEFAULT_PACKAGES),
    "install_recommends": False,
    "trust_store": {"refresh": True, "requires": ["ca-certificates"]},
    "user": {
        "name": "vscode",
        "groups": ["adm", "users"],
        "shell": "/bin/bash",
        "create_home": True,
    },
}


@dataclass(frozen=True)
class Recipe:
    raw: Dict[str, Any]

    @property
    def build_args(self) -> Dict[str, str]:
        return dict(self.raw.get("build_args") or {})

    @property
    def base_image(self) -> str:
        return str(((self.raw.get("base") or {}).get("image")) or "ubuntu")

    @property
    def base_tag(self) -> Optional[str]:
        tag = (self.raw.get("base") or {}).get("tag")
        return str(tag) if tag else None

    @property
    def base_ref(self) -> str:
        if self.base_tag:
            return f"{self.base_image}:{self.base_tag}"
        return self.base_image

    @property
    def packages(self) -> List[str]:
        return [str(p) for p in (self.raw.get("packages") or [])]

    @property
    def install_recommends(self) -> bool:
        return bool(self.raw.get("install_recommends", False))

    @property
    def refresh_trust_store(self) -> bool:
        return bool((self.raw.get("trust_store") or {}).get("refresh", True))

    @property
    def trust_store_requires(self) -> List[str]:
        ts = self.raw.get("trust_store") or {}
        return [str(p) for p in ts.get("requires", ["ca-certificates"]) or []]

    @property
    def username(self) -> str:
        return str((self.raw.get("user") or {}).get("name") or "")

    @property
    def user_groups(self) -> List[str]:
        return [str(g) for g in ((self.raw.get("user") or {}).get("groups") or [])]

    @property
    def user_shell(self) -> str:
        return str((self.raw.get("user") or {}).get("shell") or "/bin/bash")

    @property
    def create_home(self) -> bool:
        return bool((self.raw.get("user") or {}).get("create_home", True))

    def with_build_args(self, overrides: Mapping[str, str]) -> "Recipe":
        raw = copy.deepcopy(self.raw)
        args = dict(raw.get("build_args") or {})
        args.update(overrides)
        raw["build_args"] = args
        return Recipe(raw=raw)

    def validate(self) -> "Recipe":
        pkgs = self.packages
        if not pkgs:
            raise RecipeError("recipe.packages must not be empty")
        dupes = sorted({p for p in pkgs if pkgs.count(p) > 1})
        if dupes:
            raise RecipeError(f"recipe.packages has duplicates: {', '.join(dupes)}")
        if not self.username:
            raise RecipeError("recipe.user.name must be set")
        if not self.user_shell.startswith("/"):
            raise RecipeError(f"recipe.user.shell must be an absolute path: {self.user_shell}")
        for k, v in (self.raw.get("build_args") or {}).items():
            if not isinstance(v, str):
                raise RecipeError(f"build arg {k} must be a string, got {type(v).__name__}")
        return self


def default_recipe() -> Recipe:
    return Recipe(raw=copy.deepcopy(DEFAULT_RECIPE))


def load_recipe(path: str) -> Recipe:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("recipe must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read recipes") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("recipe must contain a mapping/object")

    return Recipe(raw=raw)


def parse_build_args(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Parse KEY=VALUE pairs from --build-arg flags."""

    out: Dict[str, str] = {}
    for item in pairs or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise RecipeError(f"build arg must be KEY=VALUE: {item!r}")
        out[key] = value
    return out
