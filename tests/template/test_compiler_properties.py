"""
Property-based tests for the request template compiler.
"""

import pytest
from hypothesis import given, settings, strategies as st

from templar.core.exceptions import CompilationError
from templar.core.models import Environment
from templar.template.compiler import TemplateCompiler

# Text that can never open or escape a marker
plain_text = st.text(alphabet=st.characters(blacklist_characters="{\\"), max_size=200)

names = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,12}", fullmatch=True)

variables = st.dictionaries(
    names, st.text(alphabet=st.characters(blacklist_characters="{"), max_size=30),
    max_size=8,
)


@given(template=plain_text, env_vars=variables)
@settings(max_examples=200, deadline=None)
def test_template_without_markers_is_unchanged(template, env_vars):
    """Compiling marker-free text returns it unchanged for any environment."""
    env = Environment(id=1, name="Any", variables=env_vars)
    assert TemplateCompiler().compile(template, env) == template


@given(prefix=plain_text, suffix=plain_text, name=names, env_vars=variables)
@settings(max_examples=200, deadline=None)
def test_undefined_variable_always_fails(prefix, suffix, name, env_vars):
    """A marker whose key is missing always fails and names the key."""
    env_vars.pop(name, None)
    env = Environment(id=1, name="Any", variables=env_vars)

    with pytest.raises(CompilationError) as exc_info:
        TemplateCompiler().compile(f"{prefix}{{{{{name}}}}}{suffix}", env)

    assert exc_info.value.variable == name


@given(prefix=plain_text, suffix=plain_text, name=names, value=plain_text)
@settings(max_examples=200, deadline=None)
def test_compilation_is_deterministic(prefix, suffix, name, value):
    """Repeated compilation gives identical output."""
    template = f"{prefix}{{{{{name}}}}}{suffix}"
    env = Environment(id=1, name="Any", variables={name: value})
    compiler = TemplateCompiler()

    first = compiler.compile(template, env)

    assert first == compiler.compile(template, env)
    assert first == f"{prefix}{value}{suffix}"
