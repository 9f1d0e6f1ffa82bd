"""Tests for spillway._config."""

from __future__ import annotations

import pytest

from spillway._config import configure, get_backend, reset, strict_dependencies
from spillway.backends import otel
from spillway.backends.logging import LoggingBackend


@pytest.fixture
def no_otel(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(otel, "_HAS_OTEL", False)


class TestConfigure:
    def test_configure_with_string_logging(self) -> None:
        configure("logging")
        backend = get_backend()
        assert isinstance(backend, LoggingBackend)

    def test_configure_with_instance(self) -> None:
        instance = LoggingBackend()
        configure(instance)
        assert get_backend() is instance

    @pytest.mark.usefixtures("no_otel")
    def test_configure_otel_without_package_raises(self) -> None:
        with pytest.raises(RuntimeError, match="opentelemetry-api is required"):
            configure("otel")

    def test_configure_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown backend"):
            configure("bogus")

    @pytest.mark.usefixtures("no_otel")
    def test_configure_auto(self) -> None:
        configure("auto")
        assert isinstance(get_backend(), LoggingBackend)

    def test_none_keeps_backend(self) -> None:
        instance = LoggingBackend()
        configure(instance)
        configure(None, strict_dependencies=True)
        assert get_backend() is instance
        assert strict_dependencies() is True


class TestGetBackend:
    @pytest.mark.usefixtures("no_otel")
    def test_auto_detection_on_first_call(self) -> None:
        reset()
        assert isinstance(get_backend(), LoggingBackend)

    def test_returns_same_instance(self) -> None:
        b1 = get_backend()
        b2 = get_backend()
        assert b1 is b2


class TestReset:
    def test_reset_clears_backend(self) -> None:
        configure("logging")
        b1 = get_backend()
        reset()
        b2 = get_backend()
        assert b1 is not b2

    def test_reset_clears_strictness(self) -> None:
        configure(None, strict_dependencies=True)
        reset()
        assert strict_dependencies() is False
