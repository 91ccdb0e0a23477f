"""Implementation of the ``drivenote sync`` command."""

from __future__ import annotations

from ..core import NoteVault, VaultSync, load_config, run_periodic
from .common import get_client


def cmd_sync(args):
    settings = load_config()
    vault = NoteVault(args.vault or settings.vault_dir)
    syncer = VaultSync(get_client(settings), vault, args.remote_dir or settings.remote_dir)

    def _tick():
        report = syncer.run_once(progress=not args.quiet)
        if report.failed:
            print(f"Errors ({len(report.failed)}):")
            for name, err in report.failed[:10]:
                print(f"  {name}: {err}")
            if len(report.failed) > 10:
                print(f"  ... and {len(report.failed)-10} more")
        return report

    if not args.watch:
        report = _tick()
        print(f"Uploaded {len(report.uploaded)} notes from {vault.root} to {syncer.remote_dir}")
        return 1 if report.failed else 0

    interval = args.interval or settings.sync_interval
    print(f"Syncing {vault.root} every {interval}s (Ctrl+C to stop)")
    try:
        run_periodic(_tick, interval)
    except KeyboardInterrupt:
        print("\nStopped")
    return 0
