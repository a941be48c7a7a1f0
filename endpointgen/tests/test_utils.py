"""Tests for the code generation helpers."""

import pytest

from endpointgen.codegen.utils import (
    CodeBuilder,
    capitalize,
    js_string,
    path_parameters,
    title_case,
    type_prefix,
)


def test_capitalize():
    assert capitalize('toppings') == 'Toppings'
    assert capitalize('') == ''


@pytest.mark.parametrize(
    'name,expected',
    [
        ('toppings', 'Toppings'),
        ('published-api', 'Published Api'),
        ('order_service', 'Order Service'),
    ],
)
def test_title_case(name, expected):
    assert title_case(name) == expected


def test_path_parameters():
    assert path_parameters('stores/{storeId}/toppings/{name}') == ['storeId', 'name']
    assert path_parameters('toppings') == []


def test_js_string():
    assert js_string("it's") == "'it\\'s'"
    assert js_string('a\\b') == "'a\\\\b'"


def test_type_prefix():
    assert type_prefix('toppings') == 'Toppings'
    assert type_prefix('published-api') == 'Publishedapi'


class TestCodeBuilder:
    def test_blocks_and_indentation(self):
        builder = CodeBuilder()
        with builder.add_block('class A {'):
            with builder.add_block('run() {'):
                builder.add_line('return 1;')
            builder.add_line()
        assert builder.get_code() == 'class A {\n  run() {\n    return 1;\n  }\n\n}\n'

    def test_doc_comment(self):
        builder = CodeBuilder()
        builder.add_doc('First', '', 'Second')
        assert builder.get_code() == '/**\n * First\n *\n * Second\n */\n'

    def test_custom_closing(self):
        builder = CodeBuilder(indent_size=4)
        with builder.add_block('call({', '});'):
            builder.add_line('a: 1,')
        assert builder.get_code() == 'call({\n    a: 1,\n});\n'

    def test_dedent_never_goes_negative(self):
        builder = CodeBuilder()
        builder.dedent()
        builder.add_line('x')
        assert builder.lines == ['x']
