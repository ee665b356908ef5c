import os

from dotenv import find_dotenv, load_dotenv

if not os.environ.get("MRDM_ENV_LOADED"):
    load_dotenv(find_dotenv(usecwd=True))
    os.environ["MRDM_ENV_LOADED"] = "1"

from mrdm.config import ScanConfig, init_config, load_config
from mrdm.errors import (
    ConfigError,
    LockError,
    MrdmError,
    PromptError,
    StoreParseError,
    TodoIOError,
)
from mrdm.logging import configure_logging, get_logger
from mrdm.todo import (
    ChecklistRenderer,
    IdAllocator,
    PatternMatcher,
    ReconciliationEngine,
    ScanCoordinator,
    TodoItem,
    TodoStore,
    list_todos,
    mark_done,
)

__version__ = "0.3.0"

__all__ = [
    # Configuration
    "ScanConfig",
    "init_config",
    "load_config",
    # Errors
    "ConfigError",
    "LockError",
    "MrdmError",
    "PromptError",
    "StoreParseError",
    "TodoIOError",
    # Logging
    "configure_logging",
    "get_logger",
    # Engine
    "ChecklistRenderer",
    "IdAllocator",
    "PatternMatcher",
    "ReconciliationEngine",
    "ScanCoordinator",
    "TodoItem",
    "TodoStore",
    "list_todos",
    "mark_done",
]
