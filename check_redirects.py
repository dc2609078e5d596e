import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from constants import DEFAULT_TIMEOUT, STATUS_SUCCESS
from links import open_all_links
from logging_config import setup_logging
from models import VerificationResult
from verifier import all_succeeded, summary_message, to_csv_bytes, verify_text


def format_report(results: Sequence[VerificationResult]) -> str:
    """Render results as plain text, one block per line, plus the verdict."""
    lines: List[str] = []
    for r in results:
        badge = "OK" if r["status"] == STATUS_SUCCESS else "ERROR"
        lines.append(f"[{badge}] line {r['line']}: {r['existing_url']} -> {r['recommended_url']}")
        if r["existing_url_error"]:
            lines.append(f"    existing: {r['existing_url_error']}")
        if r["recommended_url_error"]:
            lines.append(f"    recommended: {r['recommended_url_error']}")
    lines.append("")
    lines.append(summary_message(results))
    return "\n".join(lines) + "\n"


def read_text(path: Path) -> str:
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Check that each existing URL redirects to the recommended URL on the same line."
    )
    p.add_argument("--existing", "-e", required=True, help="Text file with one existing URL per line.")
    p.add_argument("--recommended", "-r", required=True, help="Text file with one recommended URL per line.")
    p.add_argument("--output", "-o", help="CSV output file (optional).")
    p.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help=f"HTTP timeout in seconds (default: {DEFAULT_TIMEOUT}).")
    p.add_argument("--open", action="store_true", help="Open every existing URL in a browser tab first.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()

    existing_text = read_text(Path(args.existing))
    recommended_text = read_text(Path(args.recommended))

    if args.open:
        opened = open_all_links(existing_text)
        print(f"Opened {len(opened)} URLs in the browser")

    def _print_progress(percent: float) -> None:
        print(f"Progress: {round(percent)}%", file=sys.stderr)

    state = verify_text(existing_text, recommended_text, on_progress=_print_progress, timeout=args.timeout)
    if state["run_error"]:
        raise SystemExit(state["run_error"])

    print(format_report(state["results"]), end="")

    if args.output:
        output = Path(args.output)
        output.write_bytes(to_csv_bytes(state["results"]))
        print(f"\nCSV written -> {output}")

    return 0 if all_succeeded(state["results"]) else 1


if __name__ == "__main__":
    sys.exit(main())
