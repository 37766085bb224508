# ltm_client/cli.py
"""
ltm-cert-report: list certificates that are expired or expire soon on a BIG-IP,
with the client-ssl profiles and virtual servers using them.
"""
import argparse
import csv
import io
import json
import sys
from getpass import getpass
from typing import List, Optional

from ltm_client.core import config
from ltm_client.core.enums import ReportFormat
from ltm_client.core.exceptions import ConfigurationError, LTMClientError
from ltm_client.core.logger import get_cli_logger
from ltm_client.schemas.ltm import ExpiryReportRow
from ltm_client.services.report import get_expiring_or_expired_certificates
from ltm_client.services.session import LTMClient

logger = get_cli_logger()

CSV_COLUMNS = [
    "certificateId", "partition", "profileId", "expiration",
    "subject", "subjectAltName", "virtuals", "virtualsStatus",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ltm-cert-report",
        description="Report expiring or expired certificates on a BIG-IP and where they are used.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--host", default=config.F5_HOST, help="Management address (default: $F5_HOST)")
    parser.add_argument("--username", default=config.F5_USERNAME, help="API user (default: $F5_USERNAME)")
    parser.add_argument(
        "--password",
        default=config.F5_PASSWORD,
        help="API password (default: $F5_PASSWORD, otherwise prompted)",
    )
    parser.add_argument(
        "--days", type=int, default=config.EXPIRES_IN_DAYS,
        help=f"Report certificates expiring within this many days (default: {config.EXPIRES_IN_DAYS}).\n"
             "Already expired certificates are always included.",
    )
    parser.add_argument(
        "--no-virtuals", action="store_true",
        help="Skip the per-virtual profile lookup (faster, no virtual server column)",
    )
    parser.add_argument("--workers", type=int, default=config.F5_MAX_WORKERS,
                        help="Concurrent per-virtual requests in deep mode")
    parser.add_argument("--timeout", type=float, default=config.F5_TIMEOUT, help="HTTP timeout in seconds")
    parser.add_argument("--insecure", action="store_true", help="Do not verify the management TLS certificate")
    parser.add_argument(
        "--format", choices=[f.value for f in ReportFormat], default=ReportFormat.TABLE.value,
        help="Output format",
    )
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    return parser


def _virtual_ids(row: ExpiryReportRow) -> str:
    return "; ".join(v.id for v in row.virtuals or [])


def render_table(rows: List[ExpiryReportRow]) -> str:
    if not rows:
        return "No expiring or expired certificates found.\n"
    lines = []
    for row in rows:
        lines.append(
            f"{row.expiration.isoformat()}  {row.certificate_id}  "
            f"profile={row.profile_id or '-'}  virtuals={_virtual_ids(row) or '-'}"
        )
    return "\n".join(lines) + "\n"


def render_json(rows: List[ExpiryReportRow]) -> str:
    return json.dumps([row.model_dump(mode="json", by_alias=True) for row in rows], indent=2) + "\n"


def render_csv(rows: List[ExpiryReportRow]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for row in rows:
        data = row.model_dump(mode="json", by_alias=True)
        data["virtuals"] = _virtual_ids(row)
        writer.writerow({k: data.get(k) for k in CSV_COLUMNS})
    return buf.getvalue()


RENDERERS = {
    ReportFormat.TABLE.value: render_table,
    ReportFormat.JSON.value: render_json,
    ReportFormat.CSV.value: render_csv,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if not args.host:
            raise ConfigurationError("host", "pass --host or set F5_HOST")
        if not args.username:
            raise ConfigurationError("username", "pass --username or set F5_USERNAME")
        password = args.password or getpass(f"Password for '{args.username}' on {args.host}: ")

        with LTMClient(
            host=args.host,
            username=args.username,
            password=password,
            verify=False if args.insecure else None,
            timeout=args.timeout,
            pool_size=args.workers,
        ) as client:
            rows = get_expiring_or_expired_certificates(
                client,
                expires_in_days=args.days,
                fetch_virtuals=not args.no_virtuals,
                max_workers=args.workers,
            )
    except ConfigurationError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 2
    except LTMClientError as e:
        logger.error(f"Report aborted: {e.to_dict()}")
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 1

    output = RENDERERS[args.format](rows)
    if args.output:
        with open(args.output, "w", encoding="utf-8", newline="") as fh:
            fh.write(output)
        logger.info(f"Wrote {len(rows)} rows to {args.output}")
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
