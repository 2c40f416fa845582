import sys
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from errors import MalformedRecordError
from models import ClientAccount, truncate_amount
from payments_engine import PaymentsEngine

OUTPUT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = truncate_amount(value).normalize()
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def format_accounts(accounts: Dict[int, ClientAccount]) -> List[str]:
    lines = [OUTPUT_HEADER]
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        lines.append(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Please provide a CSV file to process transactions.", file=sys.stderr)
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    try:
        accounts = PaymentsEngine().process_file(argv[0])
    except (MalformedRecordError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in format_accounts(accounts):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
