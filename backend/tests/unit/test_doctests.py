"""Run the usage examples embedded in module docstrings"""

import doctest

import pytest

from orgscope.tenancy import resolver, roles


@pytest.mark.parametrize("module", [roles, resolver], ids=lambda m: m.__name__)
def test_docstring_examples(module):
    result = doctest.testmod(module)

    assert result.attempted > 0
    assert result.failed == 0
