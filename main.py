"""CLI entrypoint for gitelect.

Usage:
    python main.py <command> [--repo PATH] [options]

Commands:
    cache        Commit ancestry of every local branch
    elect        Server branch matching a local branch

Options:
    --repo PATH              Path to the git repository (default: current directory)
    --branch NAME            Local branch to resolve (default: checked-out branch)
    --server-branch NAME     Non-main branch known to the server (repeatable)
    --main NAME              Main branch known to the server
    --all-parents            Follow every parent of merge commits, not only the first
    --max-depth N            Cap commits walked per branch (default: unlimited)
    --main-competes          Let the main branch win ancestry ties
    --output FILE            Write JSON output to FILE (default: print to stdout)
    --json                   Force JSON output even for commands that normally print a summary
    --log-level LEVEL        DEBUG, INFO, WARNING, ERROR (default: $GITELECT_LOG_LEVEL or WARNING)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from gitelect.models import ResolutionOptions, ServerBranch, Tier, to_json
from gitelect.repo import GitRepository, current_branch, open_repo
from gitelect.resolvers import explain_election, load_ancestry
from gitelect.resolvers.elector import DETACHED_HEAD

ENV_LOG_LEVEL = "GITELECT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _options(args: argparse.Namespace) -> ResolutionOptions:
    return ResolutionOptions(
        first_parent=not args.all_parents,
        max_depth=args.max_depth,
        main_competes=args.main_competes,
    )


def _open(args: argparse.Namespace):
    repo = open_repo(args.repo)
    if repo is None:
        print(f"error: no git repository found at or above: {args.repo}", file=sys.stderr)
        sys.exit(1)
    return repo


def cmd_cache(args: argparse.Namespace) -> None:
    repo = _open(args)
    options = _options(args)
    cache = load_ancestry(GitRepository(repo), first_parent=options.first_parent, max_depth=options.max_depth)
    if args.json or args.output:
        _emit(to_json(cache.chains), args.output)
    elif not cache.available:
        print("Commit ancestry unavailable: local branches could not be read")
    else:
        print(f"Commit ancestry: {len(cache.chains)} local branch(es)\n")
        for name, chain in sorted(cache.chains.items()):
            tip = chain[0][:8] if chain else "-"
            print(f"  {name:<30}  tip={tip}  commits={len(chain)}")


def cmd_elect(args: argparse.Namespace) -> None:
    repo = _open(args)
    branches = [ServerBranch(name) for name in args.server_branches]
    if args.main:
        branches.append(ServerBranch(args.main, is_main=True))
    local = args.branch or current_branch(repo) or DETACHED_HEAD

    election = explain_election(local, GitRepository(repo), branches, _options(args))
    if args.json or args.output:
        _emit(to_json(election), args.output)
    elif election.tier is Tier.NO_MATCH:
        print(f"No server branch matches '{local}'")
    elif election.tier is Tier.ANCESTRY:
        print(f"'{local}' → '{election.branch}' (ancestry, {election.distance} commit(s) from tip)")
    else:
        print(f"'{local}' → '{election.branch}' ({election.tier.value})")


def _emit(text: str, output_path: str | None) -> None:
    if output_path:
        Path(output_path).write_text(text)
        print(f"Output written to: {output_path}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    # Shared flags available on every subcommand (and the top-level parser)
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", metavar="PATH", help="Path to the git repo (default: current directory)")
    common.add_argument("--all-parents", action="store_true", help="Follow every parent of merge commits")
    common.add_argument("--max-depth", type=_positive_int, default=None, metavar="N", help="Cap commits walked per branch")
    common.add_argument("--main-competes", action="store_true", help="Let the main branch win ancestry ties")
    common.add_argument("--output", default=None, metavar="FILE", help="Write JSON output to FILE")
    common.add_argument("--json", action="store_true", help="Force JSON output")
    common.add_argument(
        "--log-level",
        default=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
        metavar="LEVEL",
        help="Logging level (default: $GITELECT_LOG_LEVEL or WARNING)",
    )

    parser = argparse.ArgumentParser(
        prog="gitelect",
        description="Match a local git branch to the closest branch known to a server.",
        parents=[common],
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("cache", parents=[common], help="Commit ancestry of every local branch")
    elect = sub.add_parser("elect", parents=[common], help="Server branch matching a local branch")
    elect.add_argument("--branch", default=None, metavar="NAME", help="Local branch (default: checked-out branch)")
    elect.add_argument(
        "--server-branch",
        dest="server_branches",
        metavar="NAME",
        action="append",
        default=[],
        help="Non-main branch known to the server (repeatable)",
    )
    elect.add_argument("--main", default=None, metavar="NAME", help="Main branch known to the server")

    return parser


_COMMANDS = {
    "cache": cmd_cache,
    "elect": cmd_elect,
}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="[%(levelname)s %(asctime)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    _COMMANDS[args.command](args)


if __name__ == "__main__":
    main()
