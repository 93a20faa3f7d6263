"""Shared fixtures for the kvformat tests."""

import pytest

from kvformat import FormatEngine, RunConfig


@pytest.fixture
def make_engine():
    """Factory for small engines; every engine is closed after the test."""
    engines = []

    def _make(layout="row", rows=10, *, sut=None, oracle=None, generator=None, **config):
        engine = FormatEngine(
            RunConfig(layout=layout, rows=rows, **config),
            sut=sut,
            oracle=oracle,
            generator=generator,
        )
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.close()
