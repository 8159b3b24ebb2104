# aoplog/__init__.py
__version__ = "0.1.0"

from .aop import InterceptorChain, MethodInterceptor
from .constants import NO_VALUE
from .container import AopContainer, Binding, binding, init
from .exceptions import (
    AopError,
    BindingError,
    ComponentCreationError,
    ConfigurationError,
    InvocationStateError,
    ProviderNotFoundError,
)
from .interceptors import ConsoleInterceptor, LoggingInterceptor
from .invocation import Argument, CallState, InvocationContext
from .proxy import ProxyBinder, bind

__all__ = [
    "__version__",
    "AopContainer",
    "Binding",
    "binding",
    "init",
    "bind",
    "ProxyBinder",
    "InterceptorChain",
    "MethodInterceptor",
    "InvocationContext",
    "Argument",
    "CallState",
    "NO_VALUE",
    "ConsoleInterceptor",
    "LoggingInterceptor",
    "AopError",
    "BindingError",
    "ComponentCreationError",
    "ConfigurationError",
    "InvocationStateError",
    "ProviderNotFoundError",
]
