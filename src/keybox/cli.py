from __future__ import annotations

import argparse
import mimetypes
from pathlib import Path

from .crypto.sample import build_sample_keybox
from .engine import KeyboxImporter
from .models import RawSource
from .reporter import summary_for


def cmd_import(args: argparse.Namespace) -> int:
    path = Path(args.input)
    mime = args.mime or mimetypes.guess_type(path.name)[0]
    importer = KeyboxImporter()
    try:
        stream = path.open("rb")
    except OSError as e:
        print(f"cannot open {path}: {e}")
        return 1
    verdict = importer.import_bundle(RawSource(stream=stream, mime_type=mime, name=path.name))
    print(verdict.message)
    if not verdict.accepted:
        print(f"reason: {verdict.reason.value}")
        return 1
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    print(summary_for(KeyboxImporter().has_stored_bundle()))
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    importer = KeyboxImporter()
    print(importer.clear_bundle())
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    Path(args.output).write_text(build_sample_keybox(args.device_id), encoding="utf-8")
    print(f"wrote {args.output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser("keybox")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_imp = sub.add_parser("import")
    p_imp.add_argument("input")
    p_imp.add_argument("--mime", default=None)
    p_imp.set_defaults(func=cmd_import)

    p_st = sub.add_parser("status")
    p_st.set_defaults(func=cmd_status)

    p_clr = sub.add_parser("clear")
    p_clr.set_defaults(func=cmd_clear)

    p_smp = sub.add_parser("sample")
    p_smp.add_argument("output")
    p_smp.add_argument("--device-id", dest="device_id", default="sample-device")
    p_smp.set_defaults(func=cmd_sample)

    args = p.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
