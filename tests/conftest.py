"""
pytest configuration and fixtures for the xdrgen tests.

Provides reusable fixtures for:
- Compiling XDR source text and importing the generated module
- Running the semantic passes and inspecting diagnostics
- Hypothesis property-based testing configuration
"""

import os
import sys
import types
import itertools

import pytest

from xdrgen.compiler.config import CompilerConfig
from xdrgen.compiler.pipeline import generate
from xdrgen.internals.parser import parse_source
from xdrgen.internals.report import Reporter
from xdrgen.semantics.semantic_analyzer import SemanticAnalyzer

# Configure Hypothesis profiles
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced speed and coverage
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,  # Generated modules are compiled once per test, not per example
)

# CI profile: more thorough testing
settings.register_profile(
    "ci",
    max_examples=500,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)

# Dev profile: fast iteration
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

# Debug profile: verbose output
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


_counter = itertools.count()


def load_module(text: str, name: str = None) -> types.ModuleType:
    """Execute generated source as a module registered in sys.modules.

    dataclasses resolves string annotations through the defining module,
    so the module must be importable by name while its classes are built.
    """
    name = name or f"xdrgen_test_generated_{next(_counter)}"
    module = types.ModuleType(name)
    sys.modules[name] = module
    exec(compile(text, f"<{name}>", "exec"), module.__dict__)
    return module


@pytest.fixture
def build():
    """
    Compile XDR source and import the result.

    Usage:
        def test_point(build):
            mod = build("struct Point { int x; int y; };")
            assert mod.Point(1, 2).to_xdr() == ...
    """
    names = []

    def _build(source: str, **options) -> types.ModuleType:
        config = CompilerConfig(**options)
        text = generate(source, config, filename="test.x")
        module = load_module(text)
        names.append(module.__name__)
        return module

    yield _build
    for name in names:
        sys.modules.pop(name, None)


@pytest.fixture
def load_generated():
    """Import generated source text; the module is unregistered afterwards."""
    names = []

    def _load(text: str) -> types.ModuleType:
        module = load_module(text)
        names.append(module.__name__)
        return module

    yield _load
    for name in names:
        sys.modules.pop(name, None)


@pytest.fixture
def analyze():
    """
    Run parsing and semantic analysis, returning (resolved, reporter).

    `resolved` is None when errors were reported.
    """
    def _analyze(source: str, extended: bool = False):
        reporter = Reporter(source=source, filename="test.x")
        spec = parse_source(source, extended=extended)
        resolved = SemanticAnalyzer(reporter, "test.x").check(spec)
        return resolved, reporter

    return _analyze


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
