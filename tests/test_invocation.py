import inspect

import pytest

from aoplog.constants import NO_VALUE
from aoplog.exceptions import InvocationStateError
from aoplog.invocation import Argument, CallState, InvocationContext


class Service:
    def op(self, a, b=2, *, c=None): ...

    def variadic(self, first, *rest, **extra): ...


def _sig(fn) -> inspect.Signature:
    sig = inspect.signature(fn)
    return sig.replace(parameters=list(sig.parameters.values())[1:])


def make_ctx(fn=Service.op, *args, **kwargs) -> InvocationContext:
    return InvocationContext.for_call(
        target_type_name="pkg.Service",
        method_name=fn.__name__,
        signature=_sig(fn),
        args=args,
        kwargs=kwargs,
    )


class TestArgument:
    def test_display_uses_str(self):
        assert Argument("x", 12).display == "12"

    def test_display_of_none_is_empty(self):
        assert Argument("x", None).display == ""

    def test_is_frozen(self):
        arg = Argument("x", 1)
        with pytest.raises(AttributeError):
            arg.value = 2


class TestInvocationContext:
    def test_uses_slots(self):
        assert hasattr(InvocationContext, "__slots__")

    def test_identity(self):
        ctx = make_ctx(Service.op, 1)
        assert ctx.target_type_name == "pkg.Service"
        assert ctx.method_name == "op"
        assert ctx.qualified_name == "pkg.Service.op"

    def test_arguments_follow_declared_order_with_defaults(self):
        """Keyword calls and defaults are normalised to declared order."""
        ctx = make_ctx(Service.op, c="x", a=1)
        assert [a.name for a in ctx.arguments] == ["a", "b", "c"]
        assert [a.value for a in ctx.arguments] == [1, 2, "x"]
        assert ctx.args_display == "1,2,x"

    def test_none_argument_renders_empty(self):
        ctx = make_ctx(Service.op, 1)
        assert ctx.args_display == "1,2,"

    def test_call_args_replay_the_call(self):
        ctx = make_ctx(Service.op, 1, 3, c="z")
        assert ctx.call_args == (1, 3)
        assert ctx.call_kwargs == {"c": "z"}

    def test_variadic_parameters_are_single_arguments(self):
        ctx = make_ctx(Service.variadic, 1, 2, 3, flag=True)
        assert [a.name for a in ctx.arguments] == ["first", "rest", "extra"]
        assert ctx.arguments[1].value == (2, 3)
        assert ctx.arguments[2].value == {"flag": True}

    def test_arguments_are_immutable(self):
        ctx = make_ctx(Service.op, 1)
        assert isinstance(ctx.arguments, tuple)

    def test_argument_values_keep_identity(self):
        payload = object()
        ctx = make_ctx(Service.op, payload)
        assert ctx.arguments[0].value is payload
        assert ctx.call_args[0] is payload

    def test_bad_arguments_raise_type_error(self):
        with pytest.raises(TypeError):
            make_ctx(Service.op)

    def test_initial_state(self):
        ctx = make_ctx(Service.op, 1)
        assert ctx.state is CallState.CREATED
        assert ctx.return_value is NO_VALUE
        assert ctx.failure is None
        assert not ctx.has_return_value
        assert not ctx.has_failed
        assert ctx.local == {}

    def test_set_return_value_once(self):
        ctx = make_ctx(Service.op, 1)
        ctx.set_return_value(None)
        assert ctx.state is CallState.COMPLETED
        assert ctx.has_return_value
        assert ctx.return_value is None
        with pytest.raises(InvocationStateError):
            ctx.set_return_value(5)

    def test_failure_excludes_return_value(self):
        ctx = make_ctx(Service.op, 1)
        err = ValueError("boom")
        ctx.set_failure(err)
        assert ctx.failure is err
        assert ctx.has_failed
        assert ctx.return_value is NO_VALUE
        with pytest.raises(InvocationStateError):
            ctx.set_return_value(1)
        with pytest.raises(InvocationStateError):
            ctx.set_failure(RuntimeError())

    def test_recover_replaces_failure(self):
        ctx = make_ctx(Service.op, 1)
        ctx.set_failure(KeyError("missing"))
        ctx.recover("fallback")
        assert ctx.state is CallState.COMPLETED
        assert ctx.failure is None
        assert ctx.return_value == "fallback"
        with pytest.raises(InvocationStateError):
            ctx.recover("again")

    def test_recover_requires_a_failure(self):
        ctx = make_ctx(Service.op, 1)
        with pytest.raises(InvocationStateError, match="Nothing to recover"):
            ctx.recover(1)
        ctx.set_return_value(2)
        with pytest.raises(InvocationStateError):
            ctx.recover(1)
        assert ctx.return_value == 2

    def test_dispatch_only_once(self):
        ctx = make_ctx(Service.op, 1)
        ctx.mark_dispatching()
        assert ctx.state is CallState.DISPATCHING
        with pytest.raises(InvocationStateError):
            ctx.mark_dispatching()

    def test_repr(self):
        assert "pkg.Service.op(1,2,)" in repr(make_ctx(Service.op, 1))

    def test_no_value_is_falsy_singleton(self):
        assert not NO_VALUE
        assert repr(NO_VALUE) == "NO_VALUE"
