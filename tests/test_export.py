"""Tests for plain-text caption export"""

import pytest

from caption_studio.tools.export import export_filename, format_captions_text


def test_format_is_fixed_order_with_labels(make_caption_set):
    text = format_captions_text(make_caption_set("gen1"))

    assert text == (
        "SEO Title: gen1 title\n"
        "\n"
        "Short Caption:\n"
        "gen1 short\n"
        "\n"
        "Long Caption:\n"
        "gen1 long\n"
        "\n"
        "Hashtags:\n"
        "#cat #cute"
    )


def test_format_trims_surrounding_whitespace(make_caption_set):
    captions = make_caption_set()
    captions = captions.model_copy(
        update={"hashtags": captions.hashtags.model_copy(update={"text": "#a #b\n\n"})}
    )
    assert format_captions_text(captions).endswith("#a #b")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("cat.jpg", "cat_captions.txt"),
        ("holiday.final.mp4", "holiday_captions.txt"),
        ("noext", "noext_captions.txt"),
        (".hidden", "captions.txt"),
    ],
)
def test_export_filename(name, expected):
    assert export_filename(name) == expected
