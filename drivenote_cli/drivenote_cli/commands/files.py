"""Plain OneDrive file commands."""

from __future__ import annotations

import json
from pathlib import Path

from ..core import format_rows, format_size, safe_name, sort_entries
from .common import get_client


def cmd_ls(args):
    client = get_client()
    entries = sort_entries(client.list_children(args.path))
    rows = [
        {
            "name": e.name + ("/" if e.is_folder else ""),
            "size": "" if e.is_folder or e.size is None else format_size(e.size),
            "modified": e.modified_at.strftime("%Y-%m-%d %H:%M") if e.modified_at else "",
            "id": e.id,
        }
        for e in entries
    ]
    format_rows(rows, ["name", "size", "modified", "id"])


def cmd_info(args):
    data = get_client().get_metadata(args.item_id)
    print(json.dumps(data, ensure_ascii=False, indent=2))


def cmd_download(args):
    client = get_client()
    out = Path(args.out) if args.out else None
    if out is None or out.is_dir():
        name = client.get_metadata(args.item_id).get("name") or args.item_id
        out = (out or Path.cwd()) / safe_name(name)
    content = client.download(args.item_id)
    out.write_bytes(content)
    print(f"Saved {len(content)} bytes to {out}")


def cmd_upload(args):
    src = Path(args.src)
    remote = args.dest or f"/{src.name}"
    if remote.endswith("/"):
        remote += src.name
    data = get_client().upload(remote, src.read_bytes())
    print(f"Uploaded {src} to {remote} (id {data.get('id')})")
