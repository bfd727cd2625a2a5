import argparse
import asyncio

from .config import settings
from .demo import run_demo
from .logger import configure_logging
from .manager import TimersManager


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        prog="timers_manager", description="Run the demo timer set and print its log."
    )
    parser.add_argument("--seconds", type=float, default=5.0)
    parser.add_argument("--json", action="store_true", help="print the log as JSON")
    args = parser.parse_args(argv)

    configure_logging(settings)
    manager = asyncio.run(run_demo(TimersManager(settings=settings), args.seconds))

    if args.json:
        print(manager.journal.dump_json(indent=2))
    else:
        for entry in manager.snapshot():
            print(entry.to_dict())


if __name__ == "__main__":
    main()
