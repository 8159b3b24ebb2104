"""Interceptor protocol and chain composition.

This module provides the :class:`MethodInterceptor` protocol and the
:class:`InterceptorChain` that nests interceptors around a terminal
continuation. The first interceptor in a chain is the outermost one: it
sees the call first and the result or failure last.
"""

from typing import Callable, Iterable, Protocol, Tuple

from .exceptions import BindingError, InvocationStateError
from .invocation import InvocationContext

Proceed = Callable[[], None]
Terminal = Callable[[InvocationContext], None]


class MethodInterceptor(Protocol):
    """Protocol that interceptors must implement.

    Interceptors form a chain around a method call. Each interceptor
    receives the :class:`InvocationContext` and a zero-argument ``proceed``
    function that runs the rest of the chain, down to the real method::

        class AuditInterceptor:
            def intercept(self, ctx, proceed):
                audit.append(f"-> {ctx.method_name}")
                proceed()
                audit.append(f"<- {ctx.return_value}")

    ``proceed`` records the outcome on the context and re-raises if the
    rest of the chain failed. It may be called at most once. An
    interceptor that never calls it must complete the call itself with
    :meth:`InvocationContext.set_return_value`.

    Catching the exception from ``proceed`` does not hide it from the
    caller: the stand-in re-raises the recorded failure. An interceptor
    that deliberately returns a fallback instead calls
    :meth:`InvocationContext.recover`::

        class FallbackInterceptor:
            def intercept(self, ctx, proceed):
                try:
                    proceed()
                except LookupError:
                    ctx.recover(None)
    """

    def intercept(self, ctx: InvocationContext, proceed: Proceed) -> None: ...


def _link(interceptor: MethodInterceptor, ctx: InvocationContext, proceed: Proceed) -> Proceed:
    called = False

    def step() -> None:
        nonlocal called
        if called:
            raise InvocationStateError(
                f"proceed() called more than once by {type(interceptor).__name__} for {ctx.qualified_name}"
            )
        called = True
        interceptor.intercept(ctx, proceed)

    return step


def _terminal_step(terminal: Terminal, ctx: InvocationContext) -> Proceed:
    called = False

    def step() -> None:
        nonlocal called
        if called:
            raise InvocationStateError(f"proceed() called more than once for {ctx.qualified_name}")
        called = True
        terminal(ctx)

    return step


class InterceptorChain:
    """An immutable, ordered sequence of interceptors.

    Args:
        interceptors: Interceptor instances, outermost first.

    Raises:
        BindingError: If an entry is ``None`` or has no callable
            ``intercept`` method.
    """

    __slots__ = ("_interceptors",)

    def __init__(self, interceptors: Iterable[MethodInterceptor] = ()):
        items = tuple(interceptors)
        for idx, it in enumerate(items):
            if it is None:
                raise BindingError(f"Interceptor at position {idx} is None")
            if not callable(getattr(it, "intercept", None)):
                raise BindingError(f"Interceptor {type(it).__name__} at position {idx} has no callable intercept()")
        self._interceptors: Tuple[MethodInterceptor, ...] = items

    @property
    def interceptors(self) -> Tuple[MethodInterceptor, ...]:
        return self._interceptors

    def __len__(self) -> int:
        return len(self._interceptors)

    def build(self, ctx: InvocationContext, terminal: Terminal) -> Proceed:
        """Compose the chain into one zero-argument continuation.

        For ``[I1, I2]`` the result behaves like
        ``I1.intercept(ctx, lambda: I2.intercept(ctx, lambda: terminal(ctx)))``.
        With no interceptors it is just the terminal call.
        """
        proceed = _terminal_step(terminal, ctx)
        for interceptor in reversed(self._interceptors):
            proceed = _link(interceptor, ctx, proceed)
        return proceed

    def run(self, ctx: InvocationContext, terminal: Terminal) -> None:
        ctx.mark_dispatching()
        self.build(ctx, terminal)()

    def __repr__(self) -> str:
        names = ", ".join(type(i).__name__ for i in self._interceptors)
        return f"InterceptorChain([{names}])"
