# Upsync Output Module
# Rich console output

from upsync.output.console import Console, ConsoleObserver, create_console

__all__ = [
    "Console",
    "ConsoleObserver",
    "create_console",
]
