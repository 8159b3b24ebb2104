"""Interface stand-ins that route calls through an interceptor chain.

:class:`ProxyBinder` binds one interface to one implementation and one
ordered interceptor sequence. At bind time it generates a subclass of the
interface whose public methods build an :class:`InvocationContext`, run
the :class:`InterceptorChain` and hand back whatever the implementation
returned or raised.
"""

import inspect
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple

from .aop import InterceptorChain, MethodInterceptor
from .constants import LOGGER
from .exceptions import BindingError, InvocationStateError
from .invocation import InvocationContext


def interface_members(interface: type) -> Dict[str, inspect.Signature]:
    """Return the interceptable members of *interface* with their signatures.

    Only public plain functions are considered; static methods, class
    methods and properties are forwarded instead (see
    :func:`forwarded_members`). The ``self`` parameter is stripped from
    each signature.
    """
    members: Dict[str, inspect.Signature] = {}
    for name in dir(interface):
        if name.startswith("_"):
            continue
        raw = inspect.getattr_static(interface, name)
        if not inspect.isfunction(raw):
            continue
        sig = inspect.signature(raw)
        params = list(sig.parameters.values())[1:]
        members[name] = sig.replace(parameters=params)
    return members


def forwarded_members(interface: type, members: Mapping[str, inspect.Signature]) -> Tuple[str, ...]:
    """Public names declared on *interface* that are not intercepted.

    Properties, static and class methods and plain class attributes all
    resolve against the bound target rather than the interface.
    """
    return tuple(n for n in dir(interface) if not n.startswith("_") and n not in members)


def _type_name(tp: type) -> str:
    return f"{tp.__module__}.{tp.__qualname__}"


def _make_method(name: str, signature: inspect.Signature, original: Callable[..., Any]):
    def method(self, *args, **kwargs):
        binder: ProxyBinder = object.__getattribute__(self, "_binder")
        return binder.dispatch(name, signature, args, kwargs)

    method.__name__ = name
    method.__qualname__ = getattr(original, "__qualname__", name)
    method.__doc__ = getattr(original, "__doc__", None)
    method.__signature__ = inspect.signature(original)
    return method


def _make_forwarder(name: str) -> property:
    def fget(self):
        binder: ProxyBinder = object.__getattribute__(self, "_binder")
        return getattr(binder.target, name)

    def fset(self, value):
        binder: ProxyBinder = object.__getattribute__(self, "_binder")
        setattr(binder.target, name, value)

    return property(fget, fset, doc=f"Forwarded to the bound target's ``{name}``.")


def _proxy_class_for(interface: type, members: Mapping[str, inspect.Signature]) -> type:
    def __init__(self, binder: "ProxyBinder"):
        object.__setattr__(self, "_binder", binder)

    def __getattr__(self, name: str) -> Any:
        binder: ProxyBinder = object.__getattribute__(self, "_binder")
        return getattr(binder.target, name)

    def __repr__(self) -> str:
        binder: ProxyBinder = object.__getattribute__(self, "_binder")
        return f"<{interface.__name__} stand-in for {type(binder.target).__name__} via {binder.chain!r}>"

    namespace: Dict[str, Any] = {
        "__init__": __init__,
        "__getattr__": __getattr__,
        "__repr__": __repr__,
        "__module__": interface.__module__,
        "__doc__": f"Intercepting stand-in for {interface.__qualname__}.",
    }
    for name, sig in members.items():
        namespace[name] = _make_method(name, sig, getattr(interface, name))
    for name in forwarded_members(interface, members):
        namespace[name] = _make_forwarder(name)

    meta = type(interface)
    cls = meta(f"{interface.__name__}Proxy", (interface,), namespace)
    # Every public interface member is now defined on the stand-in.
    cls.__abstractmethods__ = frozenset()
    return cls


class ProxyBinder:
    """Binds an interface to an implementation and an interceptor chain.

    The binding is fixed at construction and validated eagerly; the
    stand-in is available as :attr:`proxy`. Its intercepted methods keep
    the interface signatures; every other public interface member reads
    and writes through to *target*.

    Args:
        interface: The class whose public methods are intercepted.
        target: The real implementation. It does not have to subclass
            *interface* but must provide every intercepted method.
        interceptors: Interceptor instances, outermost first.

    Raises:
        BindingError: If *interface* is not a class or declares no
            interceptable methods, if *target* is ``None`` or lacks one of
            them, or if an interceptor is invalid.
    """

    __slots__ = ("_interface", "_target", "_chain", "_members", "_methods", "_proxy", "_type_name")

    def __init__(self, interface: type, target: Any, interceptors: Iterable[MethodInterceptor] = ()):
        if not inspect.isclass(interface):
            raise BindingError(f"Interface must be a class, got {interface!r}")
        if target is None:
            raise BindingError(f"Implementation for {interface.__name__} is None")

        members = interface_members(interface)
        if not members:
            raise BindingError(f"Interface {interface.__name__} declares no interceptable methods")

        methods: Dict[str, Callable[..., Any]] = {}
        missing = []
        for name in members:
            attr = getattr(target, name, None)
            if callable(attr):
                methods[name] = attr
            else:
                missing.append(name)
        if missing:
            raise BindingError(
                f"{type(target).__name__} does not implement {interface.__name__}: missing {', '.join(sorted(missing))}"
            )

        self._interface = interface
        self._target = target
        self._chain = InterceptorChain(interceptors)
        self._members = members
        self._methods = methods
        self._type_name = _type_name(interface)
        self._proxy = _proxy_class_for(interface, members)(self)
        LOGGER.debug(
            "Bound %s to %s with %d interceptor(s): %s",
            interface.__name__,
            type(target).__name__,
            len(self._chain),
            ", ".join(sorted(members)),
        )

    @property
    def interface(self) -> type:
        return self._interface

    @property
    def target(self) -> Any:
        return self._target

    @property
    def chain(self) -> InterceptorChain:
        return self._chain

    @property
    def members(self) -> Mapping[str, inspect.Signature]:
        return dict(self._members)

    @property
    def proxy(self) -> Any:
        """The stand-in implementing :attr:`interface`."""
        return self._proxy

    def dispatch(self, name: str, signature: inspect.Signature, args: tuple, kwargs: dict) -> Any:
        """Run one call of *name* through the chain.

        Returns the implementation's return value, or raises the failure
        that escaped the chain unchanged.
        """
        ctx = InvocationContext.for_call(
            target_type_name=self._type_name,
            method_name=name,
            signature=signature,
            args=args,
            kwargs=kwargs,
        )
        real = self._methods[name]

        def terminal(c: InvocationContext) -> None:
            try:
                value = real(*c.call_args, **c.call_kwargs)
            except Exception as exc:
                c.set_failure(exc)
                raise
            c.set_return_value(value)

        try:
            self._chain.run(ctx, terminal)
        except Exception as exc:
            if not (ctx.has_failed or ctx.has_return_value):
                ctx.set_failure(exc)
            raise

        if ctx.has_failed:
            LOGGER.warning("Failure in %s was swallowed by an interceptor; re-raising", ctx.qualified_name)
            raise ctx.failure
        if not ctx.has_return_value:
            raise InvocationStateError(f"Chain for {ctx.qualified_name} completed without a result")
        return ctx.return_value

    def __repr__(self) -> str:
        return f"ProxyBinder({self._interface.__name__} -> {type(self._target).__name__}, {self._chain!r})"


def bind(interface: type, target: Any, *interceptors: MethodInterceptor) -> Any:
    """Shortcut for ``ProxyBinder(interface, target, interceptors).proxy``."""
    return ProxyBinder(interface, target, interceptors).proxy
