import sys
import logging
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, List

from pydantic import ValidationError

from config import get_settings
from models import ClientAccount
from payments_engine import PaymentsEngine, InputFormatError

logger = logging.getLogger(__name__)

OUTPUT_PRECISION = Decimal("0.0001")


def format_decimal(value: Decimal) -> str:
    """Round to 4 decimal places and drop trailing zeros."""
    with localcontext() as ctx:
        # quantize needs every integer digit plus the 4 decimal places
        ctx.prec = max(ctx.prec, value.adjusted() + 6)
        rounded = value.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)
        if rounded.is_zero():
            return "0"
        return f"{rounded.normalize():f}"


def format_accounts(accounts: Dict[int, ClientAccount]) -> List[str]:
    lines = ["client,available,held,total,locked"]
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


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: toy-ledger <input.csv>", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(block_locked_accounts=settings.block_locked_accounts)
    try:
        accounts = engine.process_file(argv[0])
    except (OSError, InputFormatError) as e:
        logger.error(f"Failed to process {argv[0]}: {e}")
        return 1

    # All rows are formatted before anything is written
    print("\n".join(format_accounts(accounts)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
