"""
Run PSI — command-line patient client for one Private Set Intersection run.

Reads a marker file on the patient's machine, runs the two-message PSI
exchange against a PRIVAGENE backend and prints the outcome as JSON.

Usage:
    python scripts/run_psi.py --markers genes.txt --disease breast-cancer
    python scripts/run_psi.py --markers genes.txt --disease breast-cancer \\
        --subject patient-42 --server http://localhost:8000 --no-persist
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add backend root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from app.core.config import settings
from app.core.errors import PSIError
from node.infrastructure.psi_transport import HttpPSITransport
from node.services.marker_parser import DEFAULT_MAX_MARKERS, parse_marker_file
from node.services.psi_runner import PatientPSIRunner


async def run(args: argparse.Namespace) -> int:
    parsed = parse_marker_file(args.markers, max_markers=args.max_markers)
    for bad in parsed.invalid[:10]:
        print(f"  ▸ line {bad.line_number}: '{bad.value}': {bad.reason}", file=sys.stderr)

    async with HttpPSITransport(args.server, timeout=args.timeout) as transport:
        runner = PatientPSIRunner(transport)
        try:
            outcome = await runner.run(
                args.subject, parsed.valid, args.disease, persist=not args.no_persist
            )
        except PSIError as exc:
            print(json.dumps(exc.to_dict(), indent=2))
            return 1

    print(json.dumps(outcome.to_dict(), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="PRIVAGENE PSI patient client")
    parser.add_argument("--markers", type=Path, required=True, help="Gene symbol file")
    parser.add_argument("--disease", type=str, required=True, help="Disease id")
    parser.add_argument("--subject", type=str, default="local-patient", help="Subject id for persistence")
    parser.add_argument("--server", type=str, default=settings.PSI_SERVER_URL, help="Backend base URL")
    parser.add_argument("--timeout", type=float, default=settings.PSI_REQUEST_TIMEOUT_SECONDS, help="Exchange timeout (s)")
    parser.add_argument("--max-markers", type=int, default=DEFAULT_MAX_MARKERS, help="Marker cap")
    parser.add_argument("--no-persist", action="store_true", help="Do not store the result")
    parser.add_argument("-v", "--verbose", action="store_true", help="INFO logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
