#!/usr/bin/env python3
"""Command-line entry point: search portals, apply to jobs, manage credentials.

    python run_agent.py search "data engineer" --max-age-hours 24 --remote
    python run_agent.py apply --user alice <job_id>
    python run_agent.py batch --user alice <job_id> <job_id> ...
    python run_agent.py credentials set --user alice --portal linkedin --field email=a@b.c
"""
from __future__ import annotations

import argparse
import getpass
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from autoapply.config import Settings, ensure_dirs, load_settings
from autoapply.discovery import search_all_portals
from autoapply.errors import AutoApplyError
from autoapply.log import get_logger
from autoapply.models import SearchQuery
from autoapply.orchestrator import BatchTracker, FixedDelay, Orchestrator
from autoapply.sources import get_sources
from autoapply.stores import InMemoryBatchStore, JsonJobStore, YamlUserStore
from autoapply.tracker import CsvApplicationStore
from autoapply.vault import PORTALS, CredentialVault, JsonFileSecretStore

log = get_logger(__name__)

POLL_SECONDS = 2.0


def _vault(settings: Settings) -> CredentialVault:
    return CredentialVault(settings.encryption_key, JsonFileSecretStore(settings.secrets_path))


def _orchestrator(settings: Settings, batches: InMemoryBatchStore | None = None, delay: float | None = None) -> Orchestrator:
    return Orchestrator(
        _vault(settings),
        YamlUserStore(settings.users_path),
        JsonJobStore(settings.jobs_path),
        applications=CsvApplicationStore(settings.applications_csv),
        batches=batches,
        delay=FixedDelay(delay) if delay is not None else None,
        settings=settings,
    )


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    query = SearchQuery.from_dict({
        "keywords": args.keywords,
        "location": args.location,
        "remote_only": args.remote,
        "max_age_hours": args.max_age_hours,
    })
    jobs = search_all_portals(query, get_sources(settings))
    JsonJobStore(settings.jobs_path).save(jobs)
    for job in jobs:
        when = job.published_at.strftime("%Y-%m-%d %H:%M") if job.published_at else "?"
        print(f"{job.id}  [{job.source.value}] {job.title} @ {job.company.name} ({job.location}) {when}")
    log.info("Saved %d job(s) → %s", len(jobs), settings.jobs_path.name)
    return 0


def cmd_apply(args: argparse.Namespace, settings: Settings) -> int:
    result = _orchestrator(settings).apply_single(args.user, args.job_id)
    if result.success:
        print(f"✓ Applied: {result.title} @ {result.company}")
        return 0
    print(f"✗ {result.job_id}: {result.error}")
    return 1


def cmd_batch(args: argparse.Namespace, settings: Settings) -> int:
    batches = InMemoryBatchStore()
    orchestrator = _orchestrator(settings, batches, args.delay)
    tracker = BatchTracker(batches)
    batch_id = orchestrator.apply_batch(args.user, args.job_ids)
    print(f"Batch {batch_id} started ({len(args.job_ids)} job(s))")
    try:
        while not orchestrator.wait(batch_id, timeout=POLL_SECONDS):
            state = tracker.get(batch_id)
            if state is not None:
                print(f"  progress {state.progress}%")
    except KeyboardInterrupt:
        orchestrator.cancel_batch(batch_id)
        orchestrator.wait(batch_id)

    state = tracker.get(batch_id)
    if state is None:
        return 1
    for r in state.results:
        print(f"  {'✓' if r.success else '✗'} {r.job_id} {r.error or ''}".rstrip())
    ok = sum(r.success for r in state.results)
    print(f"Batch {state.status.value}: {ok}/{len(state.job_ids)} succeeded")
    return 0 if ok == len(state.job_ids) else 1


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise AutoApplyError(f"Expected name=value, got {pair!r}")
        fields[name] = value
    return fields


def cmd_credentials(args: argparse.Namespace, settings: Settings) -> int:
    vault = _vault(settings)
    if args.action == "list":
        for portal in vault.list_portals(args.user):
            print(portal)
        return 0
    if args.action == "delete":
        if vault.delete(args.user, args.portal):
            print(f"Deleted {args.portal} credentials for {args.user}")
            return 0
        print(f"No {args.portal} credentials for {args.user}")
        return 1

    fields = _parse_fields(args.field or [])
    if "password" not in fields:
        fields["password"] = getpass.getpass(f"  {args.portal} password: ")
    vault.store(args.user, args.portal, fields)
    print(f"Stored {args.portal} credentials for {args.user}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search job portals and submit applications")
    parser.add_argument("--settings", type=Path, help="Settings YAML (default: config/settings.yaml)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Search all portals and save the results")
    p.add_argument("keywords")
    p.add_argument("--location")
    p.add_argument("--remote", action="store_true", help="Remote jobs only")
    p.add_argument("--max-age-hours", type=float)
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("apply", help="Apply to one saved job")
    p.add_argument("--user", required=True)
    p.add_argument("job_id")
    p.set_defaults(func=cmd_apply)

    p = sub.add_parser("batch", help="Apply to several saved jobs, one at a time")
    p.add_argument("--user", required=True)
    p.add_argument("--delay", type=float, help="Seconds to wait after each job")
    p.add_argument("job_ids", nargs="+")
    p.set_defaults(func=cmd_batch)

    p = sub.add_parser("credentials", help="Manage encrypted portal credentials")
    p.add_argument("action", choices=["set", "list", "delete"])
    p.add_argument("--user", required=True)
    p.add_argument("--portal", choices=PORTALS)
    p.add_argument("--field", action="append", metavar="NAME=VALUE")
    p.set_defaults(func=cmd_credentials)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "credentials" and args.action != "list" and not args.portal:
        parser.error("--portal is required for set/delete")

    ensure_dirs()
    settings = load_settings(args.settings)
    if args.headed:
        settings.headless = False
    started = time.monotonic()
    try:
        code = args.func(args, settings)
    except AutoApplyError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 2
    log.debug("%s finished in %.1fs", args.command, time.monotonic() - started)
    return code


if __name__ == "__main__":
    sys.exit(main())
