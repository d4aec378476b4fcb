import sys
import logging

from config import get_settings
from engine import PaymentsEngine, write_accounts


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format,
        stream=sys.stderr,
    )


def main():
    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        sys.exit(1)

    configure_logging()

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    accounts = engine.process_file(filepath)
    write_accounts(accounts, sys.stdout)


if __name__ == "__main__":
    main()
