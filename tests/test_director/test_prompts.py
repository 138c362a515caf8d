"""
Tests for the prompt library.
"""

import pytest

from remixstudio.director.prompts import StudioPromptLibrary


def test_analysis_prompts():
    prompts = StudioPromptLibrary.get_analysis_prompts()

    assert set(prompts) == {"image", "product", "text"}
    assert "{text}" in prompts["text"]


def test_genie_prompts_render():
    prompts = StudioPromptLibrary.get_genie_prompts()

    rendered = StudioPromptLibrary.render(prompts["history_summary"], history_text="User: hi")

    assert rendered.endswith("User: hi")


def test_render_requires_every_variable():
    with pytest.raises(KeyError):
        StudioPromptLibrary.render(StudioPromptLibrary.GENIE_HISTORY_SUMMARY)
