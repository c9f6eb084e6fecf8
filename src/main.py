import sys
import logging

from csv_codec import write_accounts
from errors import LedgerError
from replay import ReplayEngine


def main() -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = sys.argv[1]
    engine = ReplayEngine()
    try:
        engine.process_file(filepath)
        write_accounts(engine.accounts.snapshot(), sys.stdout)
    except (LedgerError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
