"""
Summary:
CLI entrypoint so you can run:
  python -m linguatime parse "next monday at 2pm"
  python -m linguatime suggest "mon" --phrase "Next Monday" --phrase "Tomorrow"
  python -m linguatime repl
  python -m linguatime serve
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime

from linguatime import session as picker
from linguatime.cli import run_repl
from linguatime.config import Config
from linguatime.formatting import format_date_only, format_date_time
from linguatime.suggestions import resolve, suggestion_from_text
from linguatime.timeparse import parse_natural_datetime


def _cmd_parse(args: argparse.Namespace) -> int:
    parsed = parse_natural_datetime(args.text, tz=args.tz, base=args.now)
    if parsed is None:
        print(json.dumps({"text": args.text, "match": False}))
        return 1
    print(json.dumps({
        "text": args.text,
        "match": True,
        "date": parsed.dt.isoformat(),
        "source": parsed.source,
        "date_only": format_date_only(parsed.dt),
        "date_time": format_date_time(parsed.dt),
    }, indent=2))
    return 0


def _cmd_suggest(args: argparse.Namespace) -> int:
    phrases = args.phrase or Config.DEFAULT_SUGGESTIONS
    live = suggestion_from_text(args.text, tz=args.tz, now=args.now) if args.text else None
    for sugg in resolve(args.text, live, phrases, tz=args.tz, now=args.now):
        label = format_date_time(sugg.date) if not args.date_only else format_date_only(sugg.date)
        print(f"{sugg.input_string:<28} {label}")
    return 0


def _cmd_repl(args: argparse.Namespace) -> int:
    state = picker.initialize(show_time=not args.date_only, phrases=args.phrase or None, tz=args.tz)
    run_repl(state, as_json=args.json)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    print(f"[linguatime] Serving on http://{args.host}:{args.port} (tz={Config.TIMEZONE})")
    uvicorn.run("linguatime.web:app", host=args.host, port=args.port, log_level=Config.LOG_LEVEL.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="linguatime", description="Natural language date input engine.")
    parser.add_argument("--tz", type=str, default=None, help="IANA zone (overrides LINGUATIME_TZ).")
    parser.add_argument("--now", type=datetime.fromisoformat, default=None, help="Reference instant, ISO-8601.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Resolve one phrase to a date.")
    p.add_argument("text", type=str)
    p.set_defaults(func=_cmd_parse)

    p = sub.add_parser("suggest", help="Show the dropdown for some typed text.")
    p.add_argument("text", type=str, nargs="?", default="")
    p.add_argument("--phrase", action="append", help="Candidate phrase (repeatable).")
    p.add_argument("--date-only", action="store_true")
    p.set_defaults(func=_cmd_suggest)

    p = sub.add_parser("repl", help="Drive a picker session interactively.")
    p.add_argument("--phrase", action="append", help="Candidate phrase (repeatable).")
    p.add_argument("--date-only", action="store_true")
    p.add_argument("--json", action="store_true", help="Print the full state after each line.")
    p.set_defaults(func=_cmd_repl)

    p = sub.add_parser("serve", help="Run the HTTP API.")
    p.add_argument("--host", type=str, default=Config.HOST)
    p.add_argument("--port", type=int, default=Config.PORT)
    p.set_defaults(func=_cmd_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
