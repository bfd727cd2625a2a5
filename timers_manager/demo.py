"""Demo timer set exercised by ``python -m timers_manager``."""

import asyncio

from .logger import logger
from .manager import TimersManager
from .types import TimerDescriptor


def _announce(name: str) -> None:
    logger.info(f"{name} fired")


def _add(a: int, b: int) -> int:
    return a + b


def _fail() -> None:
    raise RuntimeError("We have a problem!")


def build_demo(manager: TimersManager) -> TimersManager:
    """Register the demo timers ``t1``..``t5`` on ``manager``."""
    return (
        manager.add(TimerDescriptor("t1", 1000, True, _announce), "t1")
        .add(TimerDescriptor("t2", 1000, False, _add), 1, 2)
        .add(TimerDescriptor("t3", 500, True, _announce), "t3")
        .add(TimerDescriptor("t4", 500, True, _add), 22, 33)
        .add(TimerDescriptor("t5", 1200, False, _fail))
    )


async def run_demo(manager: TimersManager, seconds: float) -> TimersManager:
    """
    Start the demo timers, shuffle a few of them, and stop after ``seconds``.
    """
    build_demo(manager)
    manager.start()
    manager.pause("t2")
    manager.pause("t1")
    manager.resume("t2")
    manager.remove("t3")
    manager.resume("t1")

    await asyncio.sleep(seconds)
    manager.shutdown()
    return manager
