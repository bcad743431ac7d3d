import unittest

from litewire import Container


class TestVariadicConstructorInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_resolve_ignores_inherited_variadic_args_and_kwargs(self):
        class Base:
            def __init__(self, value: int = 7, *args, **kwargs):
                self.value = value
                self.args = args
                self.kwargs = kwargs

        class Derived(Base):
            ...
            # No explicit __init__; inherits Base.__init__ with *args/**kwargs

        child = self.cont.get(Derived)  # should ignore *args/**kwargs and use default for 'value'
        assert isinstance(child, Derived)
        assert child.value == 7
        assert child.args == ()
        assert child.kwargs == {}

    def test_resolve_variadic_only_constructor_as_zero_parameter(self):
        class Flexible:
            def __init__(self, *args, **kwargs):
                self.args = args
                self.kwargs = kwargs

        obj = self.cont.get(Flexible)
        assert obj.args == ()
        assert obj.kwargs == {}

    def test_resolve_injects_annotated_param_next_to_variadic_kwargs(self):
        class DB: ...

        class Base:
            def __init__(self, value: int = 7, **kwargs):
                self.value = value
                self.kwargs = kwargs

        class Derived(Base):
            def __init__(self, db: DB, **kwargs):
                super().__init__(**kwargs)
                self.db = db

        child = self.cont.get(Derived)

        assert isinstance(child.db, DB)
        assert child.kwargs == {}
        assert child.value == 7
