"""Tests for logging setup and field-annotated loggers."""

import io
import logging

from kube_nukem.logs import FieldLogger, configure_logging


def test_fields_prefix_messages():
    stream = io.StringIO()
    log = FieldLogger(configure_logging(verbose=True, stream=stream))
    log.with_field("crd", "foos.example.com").with_field("resource", "ns/a").debug("Nuking…")
    assert "[crd=foos.example.com resource=ns/a] Nuking…" in stream.getvalue()
    assert "DEBUG" in stream.getvalue()


def test_with_field_does_not_modify_parent():
    parent = FieldLogger(logging.getLogger("nukem-tests"), {"crd": "a"})
    child = parent.with_field("resource", "b")
    assert parent.extra == {"crd": "a"}
    assert child.extra == {"crd": "a", "resource": "b"}


def test_info_level_hides_debug():
    stream = io.StringIO()
    log = FieldLogger(configure_logging(verbose=False, stream=stream))
    log.debug("hidden")
    log.info("shown")
    assert "hidden" not in stream.getvalue()
    assert "shown" in stream.getvalue()


def test_reconfigure_replaces_handler():
    configure_logging(stream=io.StringIO())
    logger = configure_logging(stream=io.StringIO())
    assert len(logger.handlers) == 1
