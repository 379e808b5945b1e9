"""Replay a text file through the HTTP POST operator, one record per line."""
from __future__ import annotations

import argparse
import pathlib
import sys
from collections.abc import Iterable

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app import create_app
from backend.app.operators.records import Attribute, Record, StreamSchema
from backend.app.operators.service import get_host, stop_operator


def _read_lines(path: str) -> Iterable[str]:
    if path == "-":
        yield from (line.rstrip("\n") for line in sys.stdin)
        return
    with open(path, encoding="utf-8") as handle:
        yield from (line.rstrip("\n") for line in handle)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", help="text file to replay, or - for stdin")
    parser.add_argument("--field", default="message", help="name of the posted field")
    parser.add_argument("--skip-blank", action="store_true", help="ignore empty lines")
    args = parser.parse_args(argv)

    app = create_app()
    host = get_host(app)
    if host is None:
        print("Operator is disabled (ENABLE_OPERATOR=false)", file=sys.stderr)
        return 1

    schema = StreamSchema([Attribute(args.field, str)])
    sent = 0
    emitted = 0
    statuses: dict[int, int] = {}
    try:
        for line in _read_lines(args.input):
            if args.skip_blank and not line.strip():
                continue
            sent += 1
            for record in host.process(Record(schema, {args.field: line})):
                emitted += 1
                code = record.get("statusCode")
                statuses[code] = statuses.get(code, 0) + 1
    finally:
        stop_operator(app)

    summary = ", ".join(f"{code}={count}" for code, count in sorted(statuses.items()))
    print(
        "Replay completed",
        f"records={sent}",
        f"emitted={emitted}",
        f"statuses=[{summary}]",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
