import functools
import threading

import pytest

from aoplog import (
    AopContainer,
    Binding,
    BindingError,
    ComponentCreationError,
    ProviderNotFoundError,
    binding,
    init,
)
from aoplog.rates import RateCalculator, RateCalculatorInterface

from test_proxy import DuckGreeter, EnglishGreeter, Greeter, Recorder


class TestBinding:
    def test_binding_from_instance(self):
        impl = EnglishGreeter()
        b = binding(Greeter, impl)
        assert b.factory() is impl

    def test_binding_from_class(self):
        b = binding(Greeter, EnglishGreeter)
        assert isinstance(b.factory(), EnglishGreeter)

    def test_binding_from_factory(self):
        b = binding(Greeter, lambda: DuckGreeter())
        assert isinstance(b.factory(), DuckGreeter)

    def test_binding_from_partial(self, call_logger):
        c = init([binding(RateCalculatorInterface, functools.partial(RateCalculator, call_logger))])
        assert c.get(RateCalculatorInterface).calculate(1000, 1, 1, 360) == "20"

    def test_binding_from_callable_object(self):
        class GreeterFactory:
            def __call__(self):
                return EnglishGreeter()

        b = binding(Greeter, GreeterFactory())
        assert isinstance(b.factory(), EnglishGreeter)

    def test_callable_implementation_is_bound_as_instance(self):
        class CallableGreeter(EnglishGreeter):
            def __call__(self):
                raise AssertionError("not a factory")

        impl = CallableGreeter()
        assert binding(Greeter, impl).factory() is impl

    def test_interceptors_become_a_tuple(self):
        r = Recorder("A", [])
        assert binding(Greeter, EnglishGreeter, r).interceptors == (r,)

    def test_none_implementation(self):
        with pytest.raises(BindingError):
            binding(Greeter, None)

    def test_interface_must_be_a_class(self):
        with pytest.raises(BindingError):
            Binding("Greeter", EnglishGreeter)

    def test_factory_must_be_callable(self):
        with pytest.raises(BindingError):
            Binding(Greeter, 42)

    def test_bad_interceptor_fails_at_bind_time(self):
        with pytest.raises(BindingError):
            binding(Greeter, EnglishGreeter, None)


class TestAopContainer:
    def test_get_returns_singleton_stand_in(self):
        created = []

        def make():
            created.append(1)
            return EnglishGreeter()

        c = init([binding(Greeter, make)])
        first = c.get(Greeter)
        assert first is c.get(Greeter)
        assert isinstance(first, Greeter)
        assert first.greet("Ann") == "Hello Ann!"
        assert created == [1]

    def test_interceptors_applied_in_binding_order(self):
        events = []
        c = init([binding(Greeter, EnglishGreeter, Recorder("A", events), Recorder("B", events))])
        c.get(Greeter).greet("Ann")
        assert [e[:2] for e in events] == [("A", "before"), ("B", "before"), ("B", "after"), ("A", "after")]

    def test_unknown_interface(self):
        with pytest.raises(ProviderNotFoundError, match="Greeter"):
            init([]).get(Greeter)

    def test_factory_failure_is_wrapped(self):
        def make():
            raise RuntimeError("db down")

        c = init([binding(Greeter, make)])
        with pytest.raises(ComponentCreationError) as info:
            c.get(Greeter)
        assert isinstance(info.value.cause, RuntimeError)
        assert info.value.key is Greeter

    def test_factory_returning_none(self):
        c = init([binding(Greeter, lambda: None)])
        with pytest.raises(BindingError, match="returned None"):
            c.get(Greeter)

    def test_duplicate_binding(self):
        with pytest.raises(BindingError, match="already bound"):
            init([binding(Greeter, EnglishGreeter), binding(Greeter, DuckGreeter)])

    def test_register_rejects_other_types(self):
        with pytest.raises(BindingError):
            AopContainer().register((Greeter, EnglishGreeter))

    def test_eager_init_validates_implementations(self):
        class Partial:
            def greet(self, name, punctuation="!"):
                return name

        with pytest.raises(BindingError, match="does not implement"):
            init([binding(Greeter, Partial)], eager=True)

    def test_has_and_bindings(self):
        b = binding(Greeter, EnglishGreeter)
        c = init([b])
        assert c.has(Greeter)
        assert not c.has(int)
        assert c.bindings() == (b,)

    def test_shutdown_drops_resolved_stand_ins(self):
        c = init([binding(Greeter, EnglishGreeter)])
        first = c.get(Greeter)
        c.shutdown()
        assert c.get(Greeter) is not first

    def test_concurrent_resolution_creates_once(self):
        created = []
        lock = threading.Lock()

        def make():
            with lock:
                created.append(1)
            return EnglishGreeter()

        c = init([binding(Greeter, make)])
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(c.get(Greeter))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert created == [1]
        assert all(r is results[0] for r in results)
