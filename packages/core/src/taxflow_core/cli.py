"""Command-line front end.

Usage:
    taxflow return-2023.pdf
    taxflow return-2023.pdf --social-security 9932 --medicare 2323
    taxflow return-2023.pdf --json > breakdown.json
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import ValidationError

from .config import load_settings
from .exceptions import TaxFlowError
from .logging_config import configure_logging
from .models import FicaContributions
from .pdf_parser import DocumentUpload
from .report_generator import BreakdownReportGenerator, export_json
from .session import TaxSession

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taxflow",
        description="Show where the federal tax on a Form 1040 was spent.",
    )
    parser.add_argument("return_pdf", type=Path, help="Form 1040 PDF")
    parser.add_argument(
        "--social-security",
        type=int,
        default=None,
        help="Social Security tax paid (W-2 box 4)",
    )
    parser.add_argument(
        "--medicare",
        type=int,
        default=None,
        help="Medicare tax paid (W-2 box 6)",
    )
    parser.add_argument("--json", action="store_true", help="Print the JSON export")
    parser.add_argument("--budget-dir", type=Path, default=None, help="Budget table directory")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument(
        "--no-subcategories",
        action="store_true",
        help="Only list top-level categories",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.budget_dir is not None:
        overrides["budget_dir"] = args.budget_dir
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    try:
        settings = load_settings(**overrides)
    except TaxFlowError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    configure_logging(settings)

    fica = None
    if args.social_security is not None or args.medicare is not None:
        try:
            fica = FicaContributions(
                social_security=args.social_security or 0,
                medicare=args.medicare or 0,
            )
        except ValidationError as e:
            print(f"Error: invalid FICA amount: {e.errors()[0]['msg']}", file=sys.stderr)
            return 1

    session = TaxSession(settings)
    try:
        upload = DocumentUpload.from_path(args.return_pdf)
        session.upload(upload)
        result = session.submit(session.tax_input_from_upload(fica=fica))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Could not read {args.return_pdf}: {e.strerror}", file=sys.stderr)
        return 1
    except TaxFlowError as e:
        logger.warning("taxflow_failed", error=e.message, kind=type(e).__name__)
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1

    if args.json:
        print(export_json(result))
    else:
        report = BreakdownReportGenerator(include_subcategories=not args.no_subcategories)
        print(report.generate(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
