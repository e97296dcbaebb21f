from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .dockerfile import render_dockerfile
from .errors import CommandError, StepFailure
from .lib.chroot import is_host_root, path_in_target
from .lib.docker import docker_build
from .lib.env import PATHS
from .logging_utils import configure_logging
from .pipeline import run_pipeline
from .recipe import Recipe, default_recipe, load_recipe, parse_build_args
from .state_store import ensure_defaults, load_state, save_state
from .steps import CreateUserStep, InstallPackagesStep, RefreshTrustStoreStep, ResolveBaseStep
from .verify import verify_environment

logger = logging.getLogger(__name__)


def build_steps():
    # Order matters: certificates must be installed before they are trusted,
    # and the login shell must exist before the user is created.
    return [
        ResolveBaseStep(),
        InstallPackagesStep(),
        RefreshTrustStoreStep(),
        CreateUserStep(),
    ]


def resolve_recipe(path: Optional[str], build_args: Optional[list[str]] = None) -> Recipe:
    recipe = load_recipe(path) if path else default_recipe()
    overrides = parse_build_args(build_args)
    if overrides:
        recipe = recipe.with_build_args(overrides)
    return recipe.validate()


def output_paths(
    target_root: str,
    state_path: Optional[str],
    log_path: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    """Pick state and log locations for a run.

    Provisioning the host root is an image build: anything written under / is
    baked into the image, so nothing is persisted unless asked for. A chroot
    target keeps state and log on the host, outside the root.
    """

    if is_host_root(target_root):
        return state_path, log_path
    return state_path or PATHS.state_default, log_path or PATHS.log_default


def run(
    *,
    recipe: Recipe,
    target_root: str = PATHS.target_root,
    state_path: Optional[str] = None,
    log_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
) -> Dict[str, Any]:
    """Run the provisioning pipeline, persisting state when a state path applies."""

    state_path, log_path = output_paths(target_root, state_path, log_path)
    actual_log_path = configure_logging(log_path, verbose=verbose)

    for what, path in (("state", state_path), ("log", actual_log_path)):
        if path and path_in_target(target_root, path):
            logger.warning("%s file %s is inside the provisioned root and will ship with it", what, path)

    state = ensure_defaults(load_state(state_path) if state_path else {})
    state["config"]["target_root"] = target_root
    state["config"]["dry_run"] = dry_run
    # Build args never reach the provisioned root.
    state["recipe"] = {k: v for k, v in recipe.raw.items() if k != "build_args"}
    state.setdefault("execution", {}).setdefault("paths", {})["log_path"] = actual_log_path

    steps = build_steps()

    try:
        result = run_pipeline(
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            resume=resume,
        )
        state = result.state
        state.setdefault("execution", {}).setdefault("summary", {})["ran_steps"] = result.ran_steps
        state.setdefault("execution", {}).setdefault("summary", {})["skipped_steps"] = result.skipped_steps
        logger.info("Provisioning finished: %s", ", ".join(result.ran_steps) or "nothing to do")
        return state
    except StepFailure as e:
        logger.error("Provisioning failed at %s (exit %s)", e.step_id, e.returncode)
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": e.step_id,
                "returncode": e.returncode,
                "error": str(e),
            }
        )
        raise
    finally:
        if state_path:
            save_state(state_path, state)


def cmd_provision(args: argparse.Namespace) -> int:
    recipe = resolve_recipe(args.recipe, args.build_arg)
    try:
        run(
            recipe=recipe,
            target_root=args.root,
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            resume=bool(args.resume),
            dry_run=bool(args.dry_run),
            verbose=bool(args.verbose),
        )
    except StepFailure as e:
        print(f"provisioning failed at {e.step_id}: {e}", file=sys.stderr)
        return e.returncode or 1
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    text = render_dockerfile(resolve_recipe(args.recipe, args.build_arg))
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    configure_logging(args.log, verbose=bool(args.verbose))
    recipe = resolve_recipe(args.recipe, args.build_arg)
    try:
        docker_build(
            render_dockerfile(recipe),
            tag=args.tag,
            build_args=recipe.build_args,
            dry_run=bool(args.dry_run),
        )
    except CommandError as e:
        logger.error("docker build failed (%s)", e.returncode)
        return e.returncode or 1
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    recipe = resolve_recipe(args.recipe)
    report = verify_environment(args.root, recipe)
    for p in report.problems:
        print(p)
    return 0 if report.ok else 1


def _add_recipe_args(p: argparse.ArgumentParser, *, build_args: bool = True) -> None:
    p.add_argument("--recipe", default=None, help="Recipe YAML (default: built-in devcontainer recipe)")
    if build_args:
        p.add_argument(
            "--build-arg",
            action="append",
            default=None,
            metavar="KEY=VALUE",
            help="Override a recipe build argument (repeatable)",
        )


def make_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="devbox-provision")
    sub = p.add_subparsers(dest="command", required=True)

    pp = sub.add_parser("provision", help="Provision a target root")
    _add_recipe_args(pp)
    pp.add_argument("--root", default=PATHS.target_root, help="Target root (/ runs in place, otherwise chroot)")
    pp.add_argument(
        "--state",
        default=None,
        help=f"Provisioning state (json|yaml). Default: none for /, {PATHS.state_default} otherwise",
    )
    pp.add_argument(
        "--log",
        default=None,
        help=f"Log file. Default: console only for /, {PATHS.log_default} otherwise",
    )
    pp.add_argument("--start-at", default=None, help="Start at step_id (e.g. 20_install_packages)")
    pp.add_argument("--stop-after", default=None, help="Stop after step_id")
    pp.add_argument("--resume", action="store_true", help="Skip steps recorded as completed in state")
    pp.add_argument("--dry-run", action="store_true")
    pp.add_argument("-v", "--verbose", action="store_true", help="Log command output")
    pp.set_defaults(func=cmd_provision)

    pr = sub.add_parser("render", help="Render the recipe as a Dockerfile")
    _add_recipe_args(pr)
    pr.add_argument("-o", "--output", default=None, help="Write to file instead of stdout")
    pr.set_defaults(func=cmd_render)

    pb = sub.add_parser("build", help="Build an image with docker from the rendered recipe")
    _add_recipe_args(pb)
    pb.add_argument("--tag", required=True)
    pb.add_argument("--log", default=None, help="Log file (default: console only)")
    pb.add_argument("--dry-run", action="store_true")
    pb.add_argument("-v", "--verbose", action="store_true", help="Log docker output")
    pb.set_defaults(func=cmd_build)

    pv = sub.add_parser("verify", help="Check a provisioned root against the recipe")
    _add_recipe_args(pv, build_args=False)
    pv.add_argument("--root", default=PATHS.target_root)
    pv.set_defaults(func=cmd_verify)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except (ValueError, FileNotFoundError) as e:
        # Bad recipe, build arg or step id: usage error, exit 2.
        parser.error(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
