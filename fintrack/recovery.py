"""
Fault Boundary

Catches unexpected faults at the application edge. Business errors
never reach here (they are ValidationResult / AuthResult values); this
is for bugs and corrupted state.

Recovery is always destructive: clear every local cache key and reload
from scratch. There is no partial repair.
"""

import inspect
import traceback
from typing import Any, Awaitable, Callable, Optional

from fintrack.audit import AuditLogger
from fintrack.services.cache import LocalCache


class FaultBoundary:
    """Runs operations, remembering the first unexpected fault."""

    def __init__(
        self,
        cache: LocalCache,
        reload: Callable[[], Awaitable[Any]],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._cache = cache
        self._reload = reload
        self._audit_logger = audit_logger or AuditLogger()
        self._fault: Optional[BaseException] = None

    @property
    def fault(self) -> Optional[BaseException]:
        return self._fault

    @property
    def has_fault(self) -> bool:
        return self._fault is not None

    async def run(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Call operation (sync or async) and return its result.

        On an unexpected exception the fault is recorded and logged and
        None is returned.
        """
        try:
            result = operation(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            self._fault = e
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={
                    "operation": getattr(operation, "__name__", repr(operation)),
                    "traceback": traceback.format_exc(),
                },
            )
            return None

    async def reset_and_reload(self) -> Any:
        """Wipe the local cache, forget the fault and reload."""
        self._cache.clear()
        self._audit_logger.log_application_reset()
        self._fault = None
        return await self._reload()
