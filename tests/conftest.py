"""Shared fixtures: small registries built from in-memory sources."""

from __future__ import annotations

import logging
from textwrap import dedent
from typing import Callable, Optional

import pytest

from extjs2react.registry.extract import load_unit
from extjs2react.registry.registry import Registry

FRAMEWORK_SOURCE = """\
Ext.define('Ext.Widget', {
    xtype: 'widget',
    config: {
        cls: null
    }
});

Ext.define('Ext.Panel', {
    extend: 'Ext.Widget',
    xtype: 'panel',
    config: {
        title: null
    }
});

Ext.define('Ext.Button', {
    extend: 'Ext.Widget',
    xtype: 'button',
    config: {
        text: null
    }
});

Ext.define('Ext.util.Observable', {
    fireEvent: function(name){
        return name;
    }
});
"""


def make_registry(files: dict[str, str], parent: Optional[Registry] = None) -> Registry:
    """Finalized registry holding one unit per {path: source} entry."""
    registry = Registry(parent)
    for path, source in files.items():
        registry.register(load_unit(path, dedent(source)))
    registry.finalize()
    return registry


@pytest.fixture(autouse=True)
def propagating_logger():
    """CLI runs replace the package logger's handlers; restore the defaults."""
    logger = logging.getLogger("extjs2react")
    yield
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def build() -> Callable[..., Registry]:
    return make_registry


@pytest.fixture
def framework_source() -> str:
    return FRAMEWORK_SOURCE


@pytest.fixture
def framework() -> Registry:
    return make_registry({"index.js": FRAMEWORK_SOURCE})
