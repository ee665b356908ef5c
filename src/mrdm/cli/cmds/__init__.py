from .help import _HELP
from .todo_cmds import register as register_todo

__all__ = [
    "register_todo",
    "_HELP",
]
