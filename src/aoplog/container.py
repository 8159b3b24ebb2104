"""Binding records and the container that resolves them.

A :class:`Binding` ties an interface to an implementation recipe and an
ordered interceptor list. :func:`init` validates a set of bindings and
returns an :class:`AopContainer` that hands out one stand-in per
interface::

    container = init([
        binding(RateCalculatorInterface, RateCalculator(logger),
                ConsoleInterceptor(sys.stdout), LoggingInterceptor(logger)),
    ])
    calc = container.get(RateCalculatorInterface)
"""

import inspect
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .aop import InterceptorChain, MethodInterceptor
from .constants import LOGGER
from .exceptions import BindingError, ComponentCreationError, ProviderNotFoundError
from .proxy import ProxyBinder, interface_members

Factory = Callable[[], Any]


@dataclass(frozen=True)
class Binding:
    """Explicit wiring for one interface.

    Attributes:
        interface: The class callers resolve.
        factory: Zero-argument callable producing the implementation.
        interceptors: Interceptor instances, outermost first.
    """

    interface: type
    factory: Factory
    interceptors: Tuple[MethodInterceptor, ...] = ()

    def __post_init__(self):
        if not inspect.isclass(self.interface):
            raise BindingError(f"Binding interface must be a class, got {self.interface!r}")
        if not callable(self.factory):
            raise BindingError(f"Binding factory for {self.interface.__name__} must be callable")
        object.__setattr__(self, "interceptors", tuple(self.interceptors))
        # Rejects bad interceptors now rather than on first resolution.
        InterceptorChain(self.interceptors)


def _normalize_implementation(interface: type, implementation: Any) -> Factory:
    # A callable that does not itself provide the interface is a factory.
    if inspect.isclass(implementation):
        return implementation
    if callable(implementation) and inspect.isclass(interface):
        provided = all(callable(getattr(implementation, n, None)) for n in interface_members(interface))
        if not provided:
            return implementation
    return lambda inst=implementation: inst


def binding(interface: type, implementation: Any, *interceptors: MethodInterceptor) -> Binding:
    """Build a :class:`Binding` from an instance, a class or a factory.

    Classes are instantiated with no arguments. Any other callable that
    does not provide every method of *interface* (a function, a bound
    method, a :func:`functools.partial`) is called to produce the
    implementation. Everything else is bound as the instance itself.

    Raises:
        BindingError: If *implementation* is ``None``.
    """
    if implementation is None:
        raise BindingError(f"Implementation for {getattr(interface, '__name__', interface)} is None")
    return Binding(interface, _normalize_implementation(interface, implementation), tuple(interceptors))


class AopContainer:
    """Resolves interfaces to intercepting stand-ins.

    Each interface is resolved once; the stand-in is cached and shared by
    every later :meth:`get`.
    """

    def __init__(self, bindings: Iterable[Binding] = ()):
        self._bindings: Dict[type, Binding] = {}
        self._binders: Dict[type, ProxyBinder] = {}
        self._lock = threading.RLock()
        for b in bindings:
            self.register(b)

    def register(self, b: Binding) -> None:
        if not isinstance(b, Binding):
            raise BindingError(f"Expected a Binding, got {type(b).__name__}")
        with self._lock:
            if b.interface in self._bindings:
                raise BindingError(f"Interface {b.interface.__name__} is already bound")
            self._bindings[b.interface] = b

    def has(self, interface: type) -> bool:
        return interface in self._bindings

    def bindings(self) -> Tuple[Binding, ...]:
        return tuple(self._bindings.values())

    def binder_for(self, interface: type) -> ProxyBinder:
        binder = self._binders.get(interface)
        if binder is not None:
            return binder
        with self._lock:
            binder = self._binders.get(interface)
            if binder is not None:
                return binder
            b = self._bindings.get(interface)
            if b is None:
                raise ProviderNotFoundError(interface)
            start = time.perf_counter()
            try:
                target = b.factory()
            except Exception as e:
                raise ComponentCreationError(interface, e) from e
            if target is None:
                raise BindingError(f"Factory for {interface.__name__} returned None")
            binder = ProxyBinder(interface, target, b.interceptors)
            self._binders[interface] = binder
            LOGGER.debug("Resolved %s in %.3f ms", interface.__name__, (time.perf_counter() - start) * 1000)
            return binder

    def get(self, interface: type) -> Any:
        """Return the stand-in for *interface*.

        Raises:
            ProviderNotFoundError: If *interface* is not bound.
            ComponentCreationError: If the implementation factory raises.
        """
        return self.binder_for(interface).proxy

    def shutdown(self) -> None:
        with self._lock:
            self._binders.clear()


def init(bindings: Iterable[Binding], *, eager: bool = False, logger: Optional[Any] = None) -> AopContainer:
    """Create a container from explicit bindings.

    Args:
        bindings: The binding records; interface keys must be unique.
        eager: Resolve every binding immediately so implementation and
            interface mismatches surface during startup.
        logger: Optional logger that receives the startup summary.
    """
    container = AopContainer(bindings)
    if eager:
        for b in container.bindings():
            container.binder_for(b.interface)
    (logger or LOGGER).debug("Container initialised with %d binding(s)", len(container.bindings()))
    return container
