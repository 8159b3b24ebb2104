"""Per-call invocation data.

:class:`InvocationContext` is the passive carrier handed to every
interceptor in a chain. One context is created for each call through a
stand-in and is discarded once the call returns or raises.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .constants import LOGGER, NO_VALUE
from .exceptions import InvocationStateError


@dataclass(frozen=True)
class Argument:
    """One argument of an intercepted call.

    Attributes:
        name: The parameter name as declared on the interface method.
        value: The value passed by the caller, untouched.
    """

    name: str
    value: Any

    @property
    def display(self) -> str:
        """Text form used for logging; ``None`` renders as an empty string."""
        if self.value is None:
            return ""
        return str(self.value)


class CallState(Enum):
    CREATED = "created"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    FAILED = "failed"


class InvocationContext:
    """Invocation context passed to interceptors.

    Attributes:
        target_type_name: Dotted name of the interface declaring the method.
        method_name: The method name (e.g. ``"calculate"``).
        arguments: Ordered, immutable tuple of :class:`Argument`.
        local: Mutable dict for interceptor-to-interceptor communication.
    """

    __slots__ = (
        "target_type_name",
        "method_name",
        "arguments",
        "local",
        "_bound",
        "_state",
        "_return_value",
        "_failure",
    )

    def __init__(self, *, target_type_name: str, method_name: str, bound: inspect.BoundArguments):
        self.target_type_name = target_type_name
        self.method_name = method_name
        self.arguments: Tuple[Argument, ...] = tuple(Argument(n, v) for n, v in bound.arguments.items())
        self.local: Dict[str, Any] = {}
        self._bound = bound
        self._state = CallState.CREATED
        self._return_value: Any = NO_VALUE
        self._failure: Optional[BaseException] = None

    @classmethod
    def for_call(
        cls, *, target_type_name: str, method_name: str, signature: inspect.Signature, args: tuple, kwargs: dict
    ) -> "InvocationContext":
        """Bind caller arguments against *signature* and build a context.

        Raises:
            TypeError: If the arguments do not match the signature, exactly
                as a direct call would.
        """
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return cls(target_type_name=target_type_name, method_name=method_name, bound=bound)

    @property
    def qualified_name(self) -> str:
        return f"{self.target_type_name}.{self.method_name}"

    @property
    def args_display(self) -> str:
        return ",".join(a.display for a in self.arguments)

    @property
    def call_args(self) -> tuple:
        return self._bound.args

    @property
    def call_kwargs(self) -> dict:
        return self._bound.kwargs

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def return_value(self) -> Any:
        """The recorded result, or :data:`~aoplog.constants.NO_VALUE`."""
        return self._return_value

    @property
    def failure(self) -> Optional[BaseException]:
        return self._failure

    @property
    def has_return_value(self) -> bool:
        return self._state is CallState.COMPLETED

    @property
    def has_failed(self) -> bool:
        return self._state is CallState.FAILED

    def set_return_value(self, value: Any) -> None:
        """Complete the call with *value*.

        Used by the terminal continuation, and by interceptors that
        short-circuit the chain without calling ``proceed``.

        Raises:
            InvocationStateError: If a result or failure is already recorded.
        """
        if self._state in (CallState.COMPLETED, CallState.FAILED):
            raise InvocationStateError(f"Result already recorded for {self.qualified_name} ({self._state.value})")
        self._return_value = value
        self._state = CallState.COMPLETED

    def set_failure(self, exc: BaseException) -> None:
        if self._state in (CallState.COMPLETED, CallState.FAILED):
            raise InvocationStateError(f"Result already recorded for {self.qualified_name} ({self._state.value})")
        self._failure = exc
        self._state = CallState.FAILED

    def recover(self, value: Any) -> None:
        """Replace a recorded failure with *value*.

        This is the only way an interceptor can turn a failed call into a
        normal return; the caller then sees *value* instead of the
        exception. Call it after catching the exception ``proceed`` raised.

        Raises:
            InvocationStateError: If the call has not failed.
        """
        if self._state is not CallState.FAILED:
            raise InvocationStateError(f"Nothing to recover for {self.qualified_name} ({self._state.value})")
        LOGGER.debug("Failure in %s replaced by a value: %r", self.qualified_name, self._failure)
        self._failure = None
        self._return_value = value
        self._state = CallState.COMPLETED

    def mark_dispatching(self) -> None:
        if self._state is not CallState.CREATED:
            raise InvocationStateError(f"Invocation of {self.qualified_name} was already dispatched")
        self._state = CallState.DISPATCHING

    def __repr__(self) -> str:
        return f"InvocationContext({self.qualified_name}({self.args_display}), state={self._state.value})"
