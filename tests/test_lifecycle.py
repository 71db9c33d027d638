import pytest

from platformkit.errors import ErrorList
from platformkit.lifecycle import (
    ERR_DEPENDENCY_INIT_CHAIN_IS_REQUIRED,
    DependenciesInitializer,
    DependenciesInitializerBuilder,
)


class _Recorder:
    def __init__(self, name, journal, fail_on=None):
        self.name = name
        self.journal = journal
        self.fail_on = fail_on

    def _record(self, step):
        if step == self.fail_on:
            raise RuntimeError(f"{self.name} {step}")
        self.journal.append((self.name, step))

    def init(self):
        self._record("init")

    def start(self):
        self._record("start")

    def stop(self):
        self._record("stop")


def test_build_without_chain_raises():
    with pytest.raises(ErrorList) as info:
        DependenciesInitializerBuilder().build()
    assert len(info.value) == 1
    assert info.value.contains(ERR_DEPENDENCY_INIT_CHAIN_IS_REQUIRED)


def test_build_with_none_chain_raises():
    with pytest.raises(ErrorList):
        DependenciesInitializerBuilder().dependency_init_chain(None).build()


def test_build_with_empty_chain_runs_nothing():
    initializer = DependenciesInitializerBuilder().dependency_init_chain([]).build()
    results = [
        initializer.init_dependencies(),
        initializer.start_dependencies(),
        initializer.stop_dependencies(),
    ]
    assert results == [None, None, None]


def test_steps_run_in_chain_order():
    journal = []
    chain = [_Recorder("a", journal), _Recorder("b", journal)]
    initializer = DependenciesInitializerBuilder().dependency_init_chain(chain).build()

    results = [
        initializer.init_dependencies(),
        initializer.start_dependencies(),
        initializer.stop_dependencies(),
    ]

    assert results == [None, None, None]
    assert journal == [
        ("a", "init"),
        ("b", "init"),
        ("a", "start"),
        ("b", "start"),
        ("a", "stop"),
        ("b", "stop"),
    ]


def test_failure_stops_the_chain():
    journal = []
    chain = [
        _Recorder("a", journal),
        _Recorder("b", journal, fail_on="start"),
        _Recorder("c", journal),
    ]
    initializer = DependenciesInitializer(chain)

    with pytest.raises(RuntimeError, match="b start"):
        initializer.start_dependencies()
    assert journal == [("a", "start")]


def test_builder_returns_itself():
    builder = DependenciesInitializerBuilder()
    assert builder.dependency_init_chain([]) is builder