"""Tests for the partial reference matchers."""

from types import SimpleNamespace

import pytest

from liquidlab import partials

SOURCE = """
<div class="card">
  {{> atoms-button }}
  {{> atoms-badge:featured }}
  {{> molecules-price(amount: 500) }}
  {{> molecules-media:wide|dark(src: "a.png") }}
  {{# listItems.three }}
</div>
"""


# =============================================================================
# Matchers
# =============================================================================


def test_find_partials():
    """Every reference is found, decorated or not, in source order."""
    assert partials.find_partials(SOURCE) == [
        "{{> atoms-button }}",
        "{{> atoms-badge:featured }}",
        "{{> molecules-price(amount: 500) }}",
        '{{> molecules-media:wide|dark(src: "a.png") }}',
    ]


def test_find_partials_with_style_modifiers():
    assert partials.find_partials_with_style_modifiers(SOURCE) == [
        "{{> atoms-badge:featured }}",
        '{{> molecules-media:wide|dark(src: "a.png") }}',
    ]


def test_find_partials_with_pattern_parameters():
    assert partials.find_partials_with_pattern_parameters(SOURCE) == [
        "{{> molecules-price(amount: 500) }}",
        '{{> molecules-media:wide|dark(src: "a.png") }}',
    ]


def test_find_list_items():
    source = "{{#listItems.one}} and {{# listitems.twenty }}"
    assert partials.find_list_items(source) == [
        "{{#listItems.one}}",
        "{{# listitems.twenty }}",
    ]


def test_two_references_on_one_line_stay_separate():
    source = '{{> a(x: 1) }}<span></span>{{> b }}'
    assert partials.find_partials(source) == ["{{> a(x: 1) }}", "{{> b }}"]


def test_pattern_objects_are_searched():
    """Matchers accept objects and mappings exposing a template string."""
    as_object = SimpleNamespace(template="{{> atoms-logo }}")
    as_mapping = {"template": "{{> atoms-logo }}"}

    assert partials.find_partials(as_object) == ["{{> atoms-logo }}"]
    assert partials.find_partials(as_mapping) == ["{{> atoms-logo }}"]


@pytest.mark.parametrize(
    "finder",
    [
        partials.find_partials,
        partials.find_partials_with_style_modifiers,
        partials.find_partials_with_pattern_parameters,
        partials.find_list_items,
    ],
)
@pytest.mark.parametrize(
    "pattern",
    ["<p>no references</p>", "", None, 42, SimpleNamespace(template=None), {}],
)
def test_no_match_is_empty(finder, pattern):
    """No match is never an error."""
    assert finder(pattern) == []


# =============================================================================
# Name extraction
# =============================================================================


@pytest.mark.parametrize(
    "reference",
    [
        "{{> atoms-button }}",
        "{{>atoms-button}}",
        "{{>  atoms-button }}",
        "{{>\tatoms-button:primary  }}",
        "{{> atoms-button:primary }}",
        "{{> atoms-button:primary|large }}",
        '{{> atoms-button(text: "Buy") }}',
        '{{> atoms-button:primary(text: "Buy", size: 2) }}',
        '{{> atoms-button:primary|large(text: "a:b") }}',
    ],
)
def test_extractors_agree(reference):
    """Both extractors strip markers, modifiers and parameters."""
    assert partials.find_partial(reference) == "atoms-button"
    assert partials.find_partial_new(reference) == "atoms-button"


def test_extractors_agree_on_every_match():
    for reference in partials.find_partials(SOURCE):
        name = partials.find_partial(reference)
        assert name == partials.find_partial_new(reference)
        assert ":" not in name and "(" not in name and "{" not in name


def test_extract_path_like_names():
    reference = "{{> components/atoms/button.v2:ghost }}"
    assert partials.find_partial(reference) == "components/atoms/button.v2"
    assert partials.find_partial_new(reference) == "components/atoms/button.v2"
