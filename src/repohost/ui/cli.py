from __future__ import annotations

import argparse
import getpass
import logging
import sys
from functools import partial
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from repohost.app import (
    create_branch,
    fetch_diff,
    fetch_file,
    generate_token,
    load_settings,
    merge_branches,
    push_file,
    set_cache_enabled,
    show_current_user,
    sync_branches,
)
from repohost.config import ConfigurationError, configure_logging, require_env_vars
from repohost.domain.branches import Created, Failed, Merged
from repohost.domain.content import Committer, FileChange

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from repohost.domain.branches import ReconciliationOutcome

log = logging.getLogger(__name__)


def _parse_repo(value: str) -> tuple[str, str]:
    owner, sep, repository = value.partition("/")
    if not sep or not owner.strip() or not repository.strip() or "/" in repository:
        raise argparse.ArgumentTypeError(f"Expected OWNER/REPO, got {value!r}")
    return owner, repository


def _branch_name(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("Branch name must be non-empty")
    return value


def _add_repo_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("repo", type=_parse_repo, help="Repository as OWNER/REPO")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Work with GitHub branches, files and tokens")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    token = subparsers.add_parser("token", help="Generate and store an API token")
    token.add_argument("--username", required=True, help="GitHub username")
    token.add_argument("--note", help="Note attached to the token on GitHub")
    token.add_argument(
        "--password-env",
        action="store_true",
        help="Read the password from GITHUB_PASSWORD instead of prompting",
    )

    subparsers.add_parser("whoami", help="Show the login the stored token authenticates as")

    settings = subparsers.add_parser("settings", help="Inspect or change stored settings")
    settings_sub = settings.add_subparsers(dest="settings_command", required=True)
    settings_sub.add_parser("show", help="Print the stored username and cache flag")
    cache = settings_sub.add_parser("cache", help="Enable or disable the HTTP cache")
    cache.add_argument("state", choices=("on", "off"))

    sync = subparsers.add_parser(
        "sync",
        help="Merge SOURCE into DESTINATION, creating DESTINATION if it does not exist",
    )
    _add_repo_argument(sync)
    sync.add_argument("source", type=_branch_name, help="Branch to merge from")
    sync.add_argument("destination", type=_branch_name, help="Branch to merge into or create")
    sync.add_argument("--message", help="Commit message for the merge commit")

    create = subparsers.add_parser("create-branch", help="Create DESTINATION from SOURCE")
    _add_repo_argument(create)
    create.add_argument(
        "source", type=_branch_name, help="Branch whose head the new branch points at"
    )
    create.add_argument("destination", type=_branch_name, help="Name of the new branch")

    merge = subparsers.add_parser("merge", help="Merge SOURCE into an existing DESTINATION")
    _add_repo_argument(merge)
    merge.add_argument("source", type=_branch_name, help="Head to merge")
    merge.add_argument("destination", type=_branch_name, help="Base branch to merge into")
    merge.add_argument("--message", help="Commit message for the merge commit")

    diff = subparsers.add_parser("diff", help="Print the diff between two commits or branches")
    _add_repo_argument(diff)
    diff.add_argument("base", type=_branch_name, help="Base commit or branch")
    diff.add_argument("head", type=_branch_name, help="Head commit or branch")
    diff.add_argument("--anonymous", action="store_true", help="Do not send credentials")

    get_file = subparsers.add_parser("get-file", help="Fetch a file from a repository")
    _add_repo_argument(get_file)
    get_file.add_argument("path", help="Path of the file inside the repository")
    get_file.add_argument("--ref", help="Branch, tag or commit to read from")
    get_file.add_argument("--output", type=Path, help="Write the file here instead of stdout")
    get_file.add_argument("--anonymous", action="store_true", help="Do not send credentials")

    push = subparsers.add_parser("push-file", help="Commit a local file to a repository")
    _add_repo_argument(push)
    push.add_argument("path", help="Path of the file inside the repository")
    push.add_argument("--file", type=Path, required=True, help="Local file with the new content")
    push.add_argument("--message", required=True, help="Commit message")
    push.add_argument("--sha", help="Blob SHA of the file being replaced")
    push.add_argument("--branch", help="Branch to commit to (defaults to the default branch)")
    push.add_argument("--committer-name", help="Commit as this name")
    push.add_argument("--committer-email", help="Commit as this email")

    return parser.parse_args(list(argv))


def _read_password(args: argparse.Namespace) -> str:
    if args.password_env:
        return require_env_vars(("GITHUB_PASSWORD",))["GITHUB_PASSWORD"]
    password = getpass.getpass(f"GitHub password for {args.username}: ")
    if not password:
        raise ValueError("Password must not be empty")
    return password


def _build_file_change(args: argparse.Namespace) -> FileChange:
    committer: Committer | None = None
    if args.committer_name or args.committer_email:
        if not (args.committer_name and args.committer_email):
            raise ValueError("--committer-name and --committer-email must be given together")
        committer = Committer(name=args.committer_name, email=args.committer_email)
    return FileChange(
        path=args.path,
        content=args.file.read_bytes(),
        message=args.message,
        sha=args.sha,
        branch=args.branch,
        committer=committer,
    )


def _report_outcome(outcome: ReconciliationOutcome) -> int:
    match outcome:
        case Created(ref=ref):
            log.info("Created branch %s at %s", ref.name, ref.commit_sha)
        case Merged(result=result) if result.merged:
            log.info("Merged as %s", result.sha)
        case Merged():
            log.info("Nothing to merge, branches already up to date")
        case Failed(reason=reason, detail=detail):
            log.error("Operation failed (%s): %s", reason, detail)
            return 1
    return 0


def _issue_token(args: argparse.Namespace, password: str) -> int:
    generate_token(username=args.username, password=password, note=args.note)
    return 0


def _push_file(args: argparse.Namespace, change: FileChange) -> int:
    owner, repository = args.repo
    push_file(owner=owner, repository=repository, change=change)
    return 0


def _prepare(args: argparse.Namespace) -> Callable[[], int]:
    """Read the password or local file before any request is sent."""
    if args.command == "token":
        return partial(_issue_token, args, _read_password(args))
    if args.command == "push-file":
        return partial(_push_file, args, _build_file_change(args))
    return partial(_run, args)


def _run(args: argparse.Namespace) -> int:  # noqa: PLR0911
    command = args.command
    if command == "whoami":
        log.info("Authenticated as %s", show_current_user())
        return 0
    if command == "settings":
        if args.settings_command == "cache":
            set_cache_enabled(args.state == "on")
            return 0
        settings = load_settings()
        log.info(
            "username=%s, token=%s, cache=%s",
            settings.username,
            "set" if settings.token else "unset",
            "on" if settings.cache_enabled else "off",
        )
        return 0

    if command in {"sync", "create-branch", "merge"}:
        owner, repository = args.repo
        if command == "sync":
            outcome = sync_branches(
                owner=owner,
                repository=repository,
                source=args.source,
                destination=args.destination,
                message=args.message,
            )
        elif command == "create-branch":
            outcome = create_branch(
                owner=owner,
                repository=repository,
                source=args.source,
                destination=args.destination,
            )
        else:
            outcome = merge_branches(
                owner=owner,
                repository=repository,
                source=args.source,
                destination=args.destination,
                message=args.message,
            )
        return _report_outcome(outcome)

    if command == "diff":
        owner, repository = args.repo
        sys.stdout.write(
            fetch_diff(
                owner=owner,
                repository=repository,
                base=args.base,
                head=args.head,
                anonymous=args.anonymous,
            )
        )
        return 0
    if command == "get-file":
        owner, repository = args.repo
        repo_file = fetch_file(
            owner=owner,
            repository=repository,
            path=args.path,
            reference=args.ref,
            anonymous=args.anonymous,
        )
        if args.output is not None:
            args.output.write_bytes(repo_file.content)
            log.info("Wrote %s (%s bytes, blob %s)", args.output, repo_file.size, repo_file.sha)
        else:
            sys.stdout.buffer.write(repo_file.content)
        return 0
    raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        action = _prepare(parsed_args)
    except (ValueError, OSError, ConfigurationError) as exc:
        log.error("Error: %s", exc)
        sys.exit(2)

    try:
        exit_code = action()
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
