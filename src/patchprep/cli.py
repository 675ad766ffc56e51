"""Command-line interface for patchprep."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from patchprep import __version__
from patchprep.checks import run_checks
from patchprep.config import (
    PatchConfig,
    find_repo_root,
    load_config,
    save_config,
    set_config_value,
)
from patchprep.exceptions import ConfigError, PatchPrepError
from patchprep.git.runner import GitRunner
from patchprep.preparer import PatchSeriesPreparer, open_in_editor
from patchprep.reviewers.ranker import ReviewerRanker
from patchprep.ui.console import Console

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _get_repo_root(path: str | None = None) -> Path:
    """Find the repository root or error."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root

    root = find_repo_root()
    if root is None:
        console.error("Not inside a git repository. Specify one with --path.")
        sys.exit(1)
    return root


def _load_config(root: Path) -> PatchConfig:
    try:
        return load_config(root)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


def _load(path: str | None) -> tuple[Path, PatchConfig, GitRunner]:
    root = _get_repo_root(path)
    return root, _load_config(root), GitRunner(root)


@click.group()
@click.version_option(version=__version__, prog_name="patchprep")
@click.option("--verbose", "-v", is_flag=True, help="Log every git invocation.")
def main(verbose: bool):
    """patchprep - prepare Git patch series for mailing-list submission."""
    _setup_logging(verbose)


@click.command("prepare")
@click.argument("base", required=False)
@click.argument("version", required=False, default=1, type=click.IntRange(min=1))
@click.option("--path", "-p", default=None, help="Path to the repository.")
@click.option("--no-fetch", is_flag=True, help="Do not fetch the upstream remote.")
@click.option("--no-editor", is_flag=True, help="Do not open the patches in the editor.")
@click.option("--verbose", "-v", is_flag=True, help="Log every git invocation.")
def prepare(
    base: str | None,
    version: int,
    path: str | None,
    no_fetch: bool,
    no_editor: bool,
    verbose: bool,
):
    """Tag, check and format the current branch as patch VERSION against BASE.

    BASE defaults to the configured upstream branch, VERSION to 1.
    """
    if verbose:
        _setup_logging(verbose)
    _, config, runner = _load(path)
    if no_fetch:
        config.fetch = False

    preparer = PatchSeriesPreparer(
        runner,
        config,
        on_progress=console.msg,
        on_advisory=console.advisory,
    )
    try:
        result = preparer.prepare(base, version)
    except PatchPrepError as e:
        console.error(str(e))
        sys.exit(1)

    console.show_reviewers(result.reviewers)
    if config.open_editor and not no_editor:
        open_in_editor(runner, result.patch_dir)
    console.show_result(result)


main.add_command(prepare)


@main.command()
@click.argument("base")
@click.argument("head", required=False, default="HEAD")
@click.option("--path", "-p", default=None, help="Path to the repository.")
@click.option("--top", "-n", default=None, type=click.IntRange(min=1), help="Number of reviewers.")
@click.option("--days", default=None, type=click.IntRange(min=0), help="Recent-contributor window.")
@click.option("--exclude", default=None, help="Email to leave out (defaults to yours).")
def reviewers(
    base: str,
    head: str,
    path: str | None,
    top: int | None,
    days: int | None,
    exclude: str | None,
):
    """Suggest reviewers for the changes between BASE and HEAD."""
    _, config, runner = _load(path)
    ranker = ReviewerRanker.from_config(runner, config)
    if top is not None:
        ranker.top_n = top
    if days is not None:
        ranker.recent_window_days = days
    ranker.excluded_email = exclude if exclude is not None else (
        config.email or runner.config_value("user.email")
    )

    try:
        ranked = ranker.rank(base, head)
    except PatchPrepError as e:
        console.error(str(e))
        sys.exit(1)

    console.show_reviewers(ranked)
    if ranked:
        click.echo(ranked.format())


@main.command()
@click.argument("base")
@click.argument("head", required=False, default="HEAD")
@click.option("--path", "-p", default=None, help="Path to the repository.")
def check(base: str, head: str, path: str | None):
    """Run the sanity checks on the commits between BASE and HEAD."""
    _, config, runner = _load(path)
    email = config.email or runner.config_value("user.email")
    try:
        advisories = run_checks(
            runner, base, head, email, config.test_dir, on_advisory=console.advisory
        )
    except PatchPrepError as e:
        console.error(str(e))
        sys.exit(1)

    if advisories:
        console.warning(f"{len(advisories)} warning(s)")
    else:
        console.success("No issues found")


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the repository.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage patchprep configuration."""
    root = _get_repo_root(path)
    config = _load_config(root)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: patchprep config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}", markup=False)
    elif action == "set":
        if not key or value is None:
            console.error("Usage: patchprep config set <key> <value>")
            sys.exit(1)
        try:
            # Try to parse as JSON for non-string values
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value

            config = set_config_value(config, key, parsed_value)
            save_config(root, config)
            console.success(f"Set {key} = {parsed_value}")
        except (KeyError, ValueError):
            console.error(f"Invalid value for config key: {key}")
            sys.exit(1)


if __name__ == "__main__":
    main()
