import random
import threading
import time

from .console import console
from .logger import logger
from .utils import get_version

TASKS = ["Resolving dependencies", "Compiling sources", "Running tests"]


def run_task(name: str, fail: bool):
    """Spin for a random while, logging a note halfway through"""
    spinner = logger.info.spin(name, duration=True)
    steps = random.randint(10, 30)
    for step in range(steps):
        time.sleep(0.1)
        spinner.update(f"{name} ({step + 1}/{steps})")
        if step == steps // 2:
            logger.verb(f"{name}: halfway there")
    if fail:
        spinner.fail(f"{name} failed")
    else:
        spinner.success(f"{name} done")


def main():
    console.print(f"[bold]llogger[/bold] [dim]v{get_version()}[/dim]\n")
    logger.notice("Starting", len(TASKS), "tasks")

    threads = [
        threading.Thread(target=run_task, args=(name, index == len(TASKS) - 1))
        for index, name in enumerate(TASKS)
    ]
    for thread in threads:
        thread.start()
    try:
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return

    logger.info("All tasks finished")


if __name__ == "__main__":
    main()
