"""CLI entry point for the merchant ledger."""

import argparse
import json
import sys
from pathlib import Path

from merchant_ledger.auth import RequestContext, Role
from merchant_ledger.config import settings
from merchant_ledger.utils.logging import AuditLogger
from merchant_ledger.utils.session import set_current_context


def print_result(result: dict) -> int:
    """Print a tool result as JSON and return the process exit code."""
    print(json.dumps(result, indent=2, default=str))
    ok = result.get("success", result.get("found", False))
    return 0 if ok else 1


def run_command(args: argparse.Namespace) -> int:
    """Dispatch a parsed subcommand to the matching tool."""
    # Import here so settings overrides apply before the store is built
    from merchant_ledger.tools import (
        get_merchant_info,
        list_settlement_transactions,
        list_transactions,
    )

    if args.command == "merchant":
        return print_result(get_merchant_info.invoke({"merchant_id": args.merchant_id}))

    paging = {
        "after": args.after,
        "before": args.before,
        "limit": args.limit,
    }

    if args.command == "transactions":
        return print_result(list_transactions.invoke({
            "merchant_id": args.merchant_id,
            "year": args.year,
            "month": args.month,
            "day": args.day,
            "card_brand": args.card_brand,
            **paging,
        }))

    return print_result(list_settlement_transactions.invoke({
        "settlement_merchant_id": args.merchant_id,
        **paging,
    }))


def add_paging_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--after", type=str, default=None, help="Cursor of the last record seen")
    parser.add_argument("--before", type=str, default=None, help="Cursor bounding the page from below")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help=f"Page size (default: {settings.paging.default_page_size})",
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Merchant transaction ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py merchant merchant-1
  python main.py transactions merchant-1 --year 2025 --limit 3
  python main.py transactions merchant-1 --after <cursor>
  python main.py --role admin settlements merchant-1
        """,
    )

    parser.add_argument(
        "--role",
        type=str,
        choices=[r.value for r in Role],
        default=Role.READER.value,
        help="Role the request runs as (default: reader)",
    )
    parser.add_argument("--user", type=str, default=None, help="User ID recorded in the audit log")
    parser.add_argument(
        "--backend",
        type=str,
        choices=["memory", "dynamodb"],
        default=None,
        help=f"Record store backend (default: {settings.store_backend})",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding merchants.json and transactions.json",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    merchant = subparsers.add_parser("merchant", help="Look up a merchant")
    merchant.add_argument("merchant_id")

    transactions = subparsers.add_parser("transactions", help="List a merchant's transactions")
    transactions.add_argument("merchant_id")
    transactions.add_argument("--year", type=int, default=None)
    transactions.add_argument("--month", type=int, default=None)
    transactions.add_argument("--day", type=int, default=None)
    transactions.add_argument("--card-brand", type=str, default=None)
    add_paging_arguments(transactions)

    settlements = subparsers.add_parser(
        "settlements", help="List transactions settled to a merchant"
    )
    settlements.add_argument("merchant_id")
    add_paging_arguments(settlements)

    args = parser.parse_args()

    # Handle overrides
    if args.data_dir:
        settings.data_dir = args.data_dir
    if args.backend:
        settings.store_backend = args.backend

    set_current_context(RequestContext(
        role=Role(args.role),
        user_id=args.user,
        audit=AuditLogger(settings.audit_log_dir, user_id=args.user),
    ))

    sys.exit(run_command(args))


if __name__ == "__main__":
    main()
