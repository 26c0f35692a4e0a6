"""Tests for the block tags rendered through a Jinja environment."""

import pytest
from jinja2 import TemplateSyntaxError

from liquidlab.engine import create_environment
from liquidlab.exceptions import (
    UnknownProcessorError,
    UnknownTagError,
    UnterminatedBlockError,
)
from liquidlab.tags import FormTag, StylesheetTag, unquote


@pytest.fixture
def env():
    return create_environment()


async def render(env, source: str, **data) -> str:
    return await env.from_string(source).render_async(**data)


# =============================================================================
# javascript / schema / paginate
# =============================================================================


@pytest.mark.asyncio
async def test_javascript(env):
    html = await render(env, "{% javascript %}console.log(1){% endjavascript %}")
    assert html == "<script>console.log(1)</script>"


@pytest.mark.asyncio
async def test_javascript_body_is_not_rendered(env):
    html = await render(
        env, "{% javascript %}\nvar a = '{{ raw }}';\n{% endjavascript %}", raw="x"
    )
    assert html == "<script>\nvar a = '{{ raw }}';\n</script>"


@pytest.mark.asyncio
async def test_schema(env):
    html = await render(env, '{% schema %}{"name": "Header"}{% endschema %}')
    assert html == '<script id="schema" type="application/json">{"name": "Header"}</script>'


@pytest.mark.asyncio
async def test_paginate_renders_body(env):
    source = (
        "{% paginate collection.products by 2 %}"
        "{% for p in items %}{{ p }},{% endfor %}"
        "{% endpaginate %}"
    )
    assert await render(env, source, items=["a", "b"]) == "a,b,"


@pytest.mark.asyncio
async def test_surrounding_text_is_kept(env):
    source = "<head>\n{% javascript %}go(){% endjavascript %}\n</head>\n"
    assert await render(env, source) == "<head>\n<script>go()</script>\n</head>\n"


@pytest.mark.asyncio
async def test_raw_blocks_are_left_alone(env):
    source = "{% raw %}{% javascript %}{% endraw %}"
    assert await render(env, source) == "{% javascript %}"


# =============================================================================
# form
# =============================================================================


class TestFormTag:
    @pytest.mark.asyncio
    async def test_class_and_data_attributes(self, env):
        source = (
            "{% form 'product', class: 'product-form', "
            "data-product-id: product.id, data-kind: 'shirt' %}"
            '<input name="{{ name }}">'
            "{% endform %}"
        )
        html = await render(env, source, product={"id": 42}, name="qty")
        assert html == (
            '<form class="product-form" data-product-id="42" data-kind="shirt">'
            '<input name="qty"></form>'
        )

    @pytest.mark.asyncio
    async def test_no_arguments(self, env):
        html = await render(env, "{% form %}<button>Go</button>{% endform %}")
        assert html == '<form class=""><button>Go</button></form>'

    @pytest.mark.asyncio
    async def test_nested_tags_in_body(self, env):
        source = "{% form %}{% javascript %}x(){% endjavascript %}{% endform %}"
        assert await render(env, source) == '<form class=""><script>x()</script></form>'

    @pytest.mark.asyncio
    async def test_rendered_fresh_each_time(self, env):
        template = env.from_string("{% form 'cart' %}{{ count }}{% endform %}")
        assert await template.render_async(count=1) == '<form class="">1</form>'
        assert await template.render_async(count=2) == '<form class="">2</form>'

    def test_attribute_parsing(self, env):
        tag = FormTag(env, "'contact', class: \"wide\", data-a: 'x y', data-b: item.id, data-c:")
        assert tag.form_class == "wide"
        assert [attr.markup() for attr in tag.attributes] == [
            'data-a="x y"',
            'data-b="{{ item.id }}"',
            "data-c",
        ]


# =============================================================================
# stylesheet
# =============================================================================


class TestStylesheetTag:
    @pytest.mark.asyncio
    async def test_without_processor(self, env):
        html = await render(
            env,
            "{% stylesheet %}.x { color: {{ color }}; }{% endstylesheet %}",
            color="red",
        )
        assert html == "<style>.x { color: red; }</style>"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("processor", ["scss", "sass"])
    async def test_scss(self, env, processor):
        source = (
            f"{{% stylesheet '{processor}' %}}"
            "$accent: #ff0000; .btn { .icon { color: $accent; } }"
            "{% endstylesheet %}"
        )
        html = await render(env, source)
        assert html.startswith("<style>")
        assert html.endswith("</style>")
        assert ".btn .icon" in html
        assert "$accent" not in html

    @pytest.mark.asyncio
    async def test_processor_from_context(self, env):
        source = "{% stylesheet '{{ kind }}' %}a { b: c }{% endstylesheet %}"
        assert await render(env, source, kind="") == "<style>a { b: c }</style>"

    @pytest.mark.asyncio
    async def test_unknown_processor(self, env):
        source = "{% stylesheet 'less' %}a { b: c }{% endstylesheet %}"
        with pytest.raises(UnknownProcessorError, match="processor for less not found"):
            await render(env, source)

    def test_processor_is_raw_argument(self, env):
        assert StylesheetTag(env, "'scss'").processor == "'scss'"
        assert StylesheetTag(env, "").processor == ""


# =============================================================================
# scanning errors and line numbers
# =============================================================================


def test_unterminated_block(env):
    with pytest.raises(UnterminatedBlockError, match=r"tag \{% javascript %\} not closed"):
        env.from_string("<p>\n{% javascript %}console.log(1)")


def test_same_name_nesting_is_not_tracked(env):
    """The first end tag closes the outer block; the stray one is left over."""
    source = "{% paginate %}a{% paginate %}b{% endpaginate %}c{% endpaginate %}"
    with pytest.raises(TemplateSyntaxError, match="endpaginate"):
        env.from_string(source)


def test_preprocess_keeps_line_count(env):
    source = (
        "{% javascript %}\nvar a = 1;\nvar b = 2;\n{% endjavascript %}\n"
        "{% stylesheet\n  'scss' %}\n.a { b: c }\n{% endstylesheet %}\n"
        "<p>{{ x }}</p>"
    )
    lowered = env.preprocess(source)
    assert lowered.count("\n") == source.count("\n")
    assert "endjavascript" not in lowered
    assert "endstylesheet" not in lowered


def test_errors_report_original_line(env):
    source = "{% javascript %}\na\nb\n{% endjavascript %}\n{% if %}"
    with pytest.raises(TemplateSyntaxError) as exc_info:
        env.from_string(source)
    assert exc_info.value.lineno == 5


def test_unquote():
    assert unquote("'a'") == "a"
    assert unquote(' "b c" ') == "b c"
    assert unquote("name") is None
    assert unquote("'mixed\"") is None


# =============================================================================
# local scope
# =============================================================================


class TestLocalScope:
    """Tag bodies see loop variables, ``with`` bindings and macro arguments."""

    @pytest.mark.asyncio
    async def test_form_in_for_loop(self, env):
        source = (
            "{% for p in products %}"
            "{% form 'product', data-id: p.id %}{{ p.title }}{% endform %}"
            "{% endfor %}"
        )
        html = await render(
            env, source, products=[{"id": 1, "title": "A"}, {"id": 2, "title": "B"}]
        )
        assert html == (
            '<form class="" data-id="1">A</form><form class="" data-id="2">B</form>'
        )

    @pytest.mark.asyncio
    async def test_paginate_in_for_loop(self, env):
        source = (
            "{% for n in [1, 2] %}"
            "{% paginate %}[{{ n }}]{% endpaginate %}"
            "{% endfor %}"
        )
        assert await render(env, source) == "[1][2]"

    @pytest.mark.asyncio
    async def test_paginate_in_with(self, env):
        source = "{% with n = 3 %}{% paginate %}{{ n }}{% endpaginate %}{% endwith %}"
        assert await render(env, source) == "3"

    @pytest.mark.asyncio
    async def test_form_in_macro(self, env):
        source = (
            "{% macro card(t) %}{% form %}{{ t }}{% endform %}{% endmacro %}"
            "{{ card('hi') }}"
        )
        assert await render(env, source) == '<form class="">hi</form>'

    @pytest.mark.asyncio
    async def test_stylesheet_processor_from_loop(self, env):
        source = (
            "{% for kind in [''] %}"
            "{% stylesheet '{{ kind }}' %}.a { color: {{ c }}; }{% endstylesheet %}"
            "{% endfor %}"
        )
        assert await render(env, source, c="red") == "<style>.a { color: red; }</style>"


@pytest.mark.asyncio
async def test_render_of_unregistered_tag(env):
    (extension,) = env.extensions.values()
    with pytest.raises(UnknownTagError, match="'missing' is not registered"):
        await extension._render_tag("missing", "", "", None)
