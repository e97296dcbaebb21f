from __future__ import annotations

import pytest

from devbox_provisioner.errors import RecipeError
from devbox_provisioner.recipe import DEFAULT_RECIPE, Recipe, default_recipe, load_recipe, parse_build_args


def test_default_recipe_matches_devcontainer():
    r = default_recipe()
    assert r.base_ref == "ubuntu"
    assert r.build_args == {"VARIANT": "kinetic"}
    assert set(r.packages) == {
        "curl", "lld", "lldb", "clangd", "clang", "build-essential", "git",
        "ca-certificates", "pkg-config", "btop", "udev", "libudev-dev",
        "libasound2-dev", "aria2",
    }
    assert not r.install_recommends
    assert r.username == "vscode"
    assert r.user_groups == ["adm", "users"]
    assert r.user_shell == "/bin/bash"
    assert r.create_home


def test_default_recipe_is_a_copy():
    r = default_recipe()
    r.raw["packages"].append("vim")
    assert "vim" not in DEFAULT_RECIPE["packages"]


def test_shipped_recipe_equals_default(repo_root):
    assert load_recipe(str(repo_root / "recipes/devcontainer.yaml")).raw == DEFAULT_RECIPE


def test_pinned_tag_in_base_ref():
    r = Recipe(raw={"base": {"image": "ubuntu", "tag": "22.04"}})
    assert r.base_ref == "ubuntu:22.04"


def test_with_build_args_leaves_original_untouched():
    r = default_recipe()
    r2 = r.with_build_args({"VARIANT": "jammy", "EXTRA": "1"})
    assert r.build_args == {"VARIANT": "kinetic"}
    assert r2.build_args == {"VARIANT": "jammy", "EXTRA": "1"}


@pytest.mark.parametrize(
    "patch, match",
    [
        ({"packages": []}, "must not be empty"),
        ({"packages": ["git", "curl", "git"]}, "duplicates: git"),
        ({"user": {"name": ""}}, "user.name"),
        ({"user": {"name": "vscode", "shell": "bash"}}, "absolute"),
        ({"build_args": {"VARIANT": 22}}, "must be a string"),
    ],
)
def test_validate_rejects(patch, match):
    raw = dict(DEFAULT_RECIPE)
    raw.update(patch)
    with pytest.raises(RecipeError, match=match):
        Recipe(raw=raw).validate()


def test_load_recipe_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_recipe(str(tmp_path / "missing.yaml"))

    txt = tmp_path / "recipe.txt"
    txt.write_text("packages: [git]\n")
    with pytest.raises(ValueError, match="YAML"):
        load_recipe(str(txt))

    lst = tmp_path / "list.yaml"
    lst.write_text("- git\n")
    with pytest.raises(ValueError, match="mapping"):
        load_recipe(str(lst))


def test_parse_build_args():
    assert parse_build_args(["VARIANT=jammy", "EMPTY="]) == {"VARIANT": "jammy", "EMPTY": ""}
    assert parse_build_args(None) == {}
    with pytest.raises(RecipeError):
        parse_build_args(["VARIANT"])
