"""Tools Registry — the function catalog advertised to the provider and accepted by dispatch.

Invariants:
    - FUNCTION_CATALOG holds exactly the 4 supported operations
    - Catalog names == OperationName values (checked at import time)
    - get_tool_schema() returns None for any name outside the catalog

Design Decisions:
    - Explicit imports from each define_*_tools.py: no auto-discovery
    - One list feeds both the provider request and dispatcher acceptance, so an
      operation cannot be advertised without being dispatchable (or vice versa)
"""

from taskpilot.core.domain_types import OperationName
from taskpilot.services.define_task_tools import TOOLS_TASK
from taskpilot.services.define_assignment_tools import TOOLS_ASSIGNMENT


FUNCTION_CATALOG: list[dict] = [
    *TOOLS_TASK,          # 2 tools
    *TOOLS_ASSIGNMENT,    # 2 tools
]

_BY_NAME: dict[str, dict] = {tool["name"]: tool for tool in FUNCTION_CATALOG}

CATALOG_NAMES = frozenset(_BY_NAME)

if CATALOG_NAMES != {op.value for op in OperationName}:
    raise RuntimeError("Function catalog out of sync with OperationName")


def get_tool_schema(name: str) -> dict | None:
    """input_schema of a catalog entry, or None for unknown names."""
    tool = _BY_NAME.get(name)
    return tool["input_schema"] if tool else None
