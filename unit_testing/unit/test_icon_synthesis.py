"""
Unit tests for single-icon synthesis.
"""

import asyncio

import pytest

from aiconic.styles import UnknownStyleError
from aiconic.tools.icon_synthesis import (
    IconSynthesizer,
    MIN_FRAGMENT_LENGTH,
    clean_svg_fragment,
    fallback_fragment,
)
from unit_testing.conftest import DEFAULT_SVG_FRAGMENT, ScriptedLLM


class TestCleanSvgFragment:

    def test_strips_code_fences(self):
        raw = "```svg\n<circle cx=\"60\" cy=\"60\" r=\"20\"/>\n```"
        assert clean_svg_fragment(raw) == '<circle cx="60" cy="60" r="20"/>'

    def test_strips_xml_fence(self):
        raw = "```xml\n<rect x=\"40\" y=\"40\" width=\"40\" height=\"40\"/>```"
        assert clean_svg_fragment(raw) == '<rect x="40" y="40" width="40" height="40"/>'

    def test_strips_outer_svg_tags(self):
        raw = '<svg viewBox="0 0 120 120" xmlns="http://www.w3.org/2000/svg"><path d="M0 0"/></svg>'
        assert clean_svg_fragment(raw) == '<path d="M0 0"/>'

    def test_empty_and_none(self):
        assert clean_svg_fragment("") == ""
        assert clean_svg_fragment(None) == ""

    def test_plain_fragment_untouched(self):
        assert clean_svg_fragment(DEFAULT_SVG_FRAGMENT) == DEFAULT_SVG_FRAGMENT


class TestIconSynthesizer:
    """IconSynthesizer.synthesize behaviour."""

    @pytest.mark.asyncio
    async def test_wraps_model_fragment_in_template(self, registry):
        llm = ScriptedLLM(svg=f"```svg\n{DEFAULT_SVG_FRAGMENT}\n```")
        synthesizer = IconSynthesizer(llm, registry)

        svg = await synthesizer.synthesize("盾牌", "appstore")

        assert svg == registry.require("appstore").render(DEFAULT_SVG_FRAGMENT)

    @pytest.mark.asyncio
    async def test_request_uses_style_prompt(self, registry):
        llm = ScriptedLLM()
        synthesizer = IconSynthesizer(llm, registry, model="draw-model")

        await synthesizer.synthesize("盾牌", "neon")

        assert len(llm.calls) == 1
        call = llm.calls[0]
        assert call["model"] == "draw-model"
        assert call["temperature"] == 0.6
        assert call["max_tokens"] == 600
        assert call["messages"][0] == {"role": "system", "content": registry.require("neon").prompt_for("盾牌")}
        assert call["messages"][1] == {"role": "user", "content": '绘制 "盾牌":'}

    @pytest.mark.asyncio
    async def test_short_reply_uses_fallback(self, registry):
        llm = ScriptedLLM(svg="<g/>")
        synthesizer = IconSynthesizer(llm, registry)

        svg = await synthesizer.synthesize("盾牌", "material")

        colors = registry.require("material").colors
        assert fallback_fragment(colors) in svg
        assert '<circle cx="60" cy="60" r="20" fill="#4285F4"/>' in svg

    @pytest.mark.asyncio
    async def test_empty_reply_uses_fallback(self, registry):
        llm = ScriptedLLM(svg="")
        svg = await IconSynthesizer(llm, registry).synthesize("盾牌", "appstore")
        assert fallback_fragment(registry.require("appstore").colors) in svg

    def test_fallback_is_long_enough(self, registry):
        for plugin in registry:
            assert len(fallback_fragment(plugin.colors)) >= MIN_FRAGMENT_LENGTH

    @pytest.mark.asyncio
    async def test_unknown_style_raises_before_model_call(self, registry):
        llm = ScriptedLLM()
        synthesizer = IconSynthesizer(llm, registry)

        with pytest.raises(UnknownStyleError):
            await synthesizer.synthesize("盾牌", "vaporwave")

        assert llm.calls == [], "No model request should be made for an unknown style"

    @pytest.mark.asyncio
    async def test_model_error_returns_none(self, registry):
        llm = ScriptedLLM(svg=RuntimeError("upstream 500"))
        assert await IconSynthesizer(llm, registry).synthesize("盾牌", "appstore") is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self, registry):
        class SlowLLM(ScriptedLLM):
            async def _create(self, **kwargs):
                await asyncio.sleep(1)
                return await super()._create(**kwargs)

        llm = SlowLLM()
        synthesizer = IconSynthesizer(llm, registry, timeout_seconds=0.01)
        assert await synthesizer.synthesize("盾牌", "appstore") is None
