"""Unit tests for the ffmpeg filter builders."""

import math

import pytest

from clipchain.filters import (
    CAPTION_STYLES,
    DrawTextFilter,
    SubtitleBurnFilter,
    build_tempo_plan,
    escape_drawtext,
    escape_filter_path,
)


# ---------------------------------------------------------------------------
# Tempo plan
# ---------------------------------------------------------------------------

class TestBuildTempoPlan:
    @pytest.mark.parametrize(
        "factor, stages",
        [
            (4.0, (2.0, 2.0, 1.0)),
            (0.25, (0.5, 0.5, 1.0)),
            (1.25, (1.25,)),
            (1.0, (1.0,)),
            (3.0, (2.0, 1.5)),
            (0.3, (0.5, 0.6)),
        ],
    )
    def test_examples(self, factor, stages):
        plan = build_tempo_plan(factor)
        assert plan.stages == pytest.approx(stages)

    @pytest.mark.parametrize(
        "factor", [0.01, 0.1, 0.26, 0.5, 0.75, 1.5, 1.999, 2.0, 2.5, 7.3, 16.0, 100.0]
    )
    def test_product_and_range_invariant(self, factor):
        plan = build_tempo_plan(factor)
        assert plan.stages
        assert all(0.5 <= s <= 2.0 for s in plan.stages)
        assert math.isclose(plan.product, factor, rel_tol=1e-6)

    def test_video_multiplier_is_single_inverse(self):
        plan = build_tempo_plan(4.0)
        assert plan.video_pts_multiplier == pytest.approx(0.25)
        assert plan.video_filter() == "setpts=0.25*PTS"

    @pytest.mark.parametrize("factor", [3.0, 3000.0, 2.5e6])
    def test_video_multiplier_keeps_precision(self, factor):
        expr = build_tempo_plan(factor).video_filter()
        multiplier = float(expr.removeprefix("setpts=").removesuffix("*PTS"))
        assert multiplier > 0
        assert math.isclose(multiplier, 1.0 / factor, rel_tol=1e-8)

    def test_audio_filter_chains_stages(self):
        assert build_tempo_plan(4.0).audio_filter() == "atempo=2,atempo=2,atempo=1"
        assert build_tempo_plan(1.25).audio_filter() == "atempo=1.25"

    @pytest.mark.parametrize("factor", [0, -1.0, float("nan"), float("inf")])
    def test_rejects_non_positive(self, factor):
        with pytest.raises(ValueError, match="positive"):
            build_tempo_plan(factor)


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

def _ffmpeg_unquote(value: str) -> str:
    """One pass of ffmpeg's token unquoting: quotes group, backslash escapes."""
    out = []
    quoted = False
    i = 0
    while i < len(value):
        c = value[i]
        if quoted:
            if c == "'":
                quoted = False
            else:
                out.append(c)
        elif c == "'":
            quoted = True
        elif c == "\\" and i + 1 < len(value):
            i += 1
            out.append(value[i])
        else:
            out.append(c)
        i += 1
    return "".join(out)


def _as_parsed_by_ffmpeg(quoted_value: str) -> str:
    # Graph parse, then option parse
    return _ffmpeg_unquote(_ffmpeg_unquote(quoted_value))


class TestEscaping:
    @pytest.mark.parametrize(
        "text",
        [
            "Don't miss it",
            "a\\b",
            "Time: 5:00",
            "it's C:\\clips\\it's",
            "'quoted'",
            "plain text",
        ],
    )
    def test_drawtext_survives_both_parses(self, text):
        assert _as_parsed_by_ffmpeg(f"'{escape_drawtext(text)}'") == text

    @pytest.mark.parametrize(
        "path", ["/tmp/it's.srt", "C:\\subs\\captions.srt", "/tmp/captions.srt"]
    )
    def test_filter_path_survives_both_parses(self, path):
        assert _as_parsed_by_ffmpeg(f"'{escape_filter_path(path)}'") == path

    def test_quote_closes_and_reopens(self):
        assert escape_drawtext("It's 5:00") == "It'\\\\\\''s 5\\:00"

    def test_plain_path_unchanged(self):
        assert escape_filter_path("/tmp/captions.srt") == "/tmp/captions.srt"

    def test_backslash_doubled_once(self):
        assert escape_drawtext("a\\b") == "a\\\\b"


# ---------------------------------------------------------------------------
# Subtitle burn-in
# ---------------------------------------------------------------------------

class TestSubtitleBurnFilter:
    def test_three_presets(self):
        assert set(CAPTION_STYLES) == {"hormozi", "standard", "minimal"}

    def test_standard_filter(self):
        f = SubtitleBurnFilter("/tmp/c.srt").to_filter()
        assert f.startswith("subtitles='/tmp/c.srt':force_style='")
        assert "FontName=Arial," in f
        assert "Alignment=2" in f
        assert "BorderStyle=4" in f

    def test_hormozi_is_centered_and_bold(self):
        style = SubtitleBurnFilter("/tmp/c.srt", style="hormozi").force_style()
        assert "Alignment=10" in style
        assert "Bold=1" in style

    def test_unknown_style(self):
        with pytest.raises(ValueError, match="Unknown caption style"):
            SubtitleBurnFilter("/tmp/c.srt", style="comic")


# ---------------------------------------------------------------------------
# Text overlay
# ---------------------------------------------------------------------------

class TestDrawTextFilter:
    def test_bottom_right_window(self):
        f = DrawTextFilter("Subscribe!", start=60, end=65, position="bottom-right", fontsize=48)
        text = f.to_filter()
        assert "x=w-text_w-20:y=h-text_h-20" in text
        assert "fontsize=48" in text
        assert text.endswith("enable='gte(t,60)*lt(t,65)'")

    def test_visibility_is_half_open(self):
        f = DrawTextFilter("Hi", start=60, end=65)

        def visible(t: float) -> bool:
            return f.start <= t < f.visible_until

        assert not visible(59.999)
        assert visible(60.0)
        assert visible(64.999)
        assert not visible(65.0)
        assert f.enable_expr() == "gte(t,60)*lt(t,65)"

    def test_default_five_second_window(self):
        f = DrawTextFilter("Hi", start=12.5)
        assert f.visible_until == 17.5
        assert f.enable_expr() == "gte(t,12.5)*lt(t,17.5)"

    @pytest.mark.parametrize(
        "position, xy",
        [
            ("center", "x=(w-text_w)/2:y=(h-text_h)/2"),
            ("top", "x=(w-text_w)/2:y=20"),
            ("bottom", "x=(w-text_w)/2:y=h-text_h-20"),
            ("top-left", "x=20:y=20"),
            ("top-right", "x=w-text_w-20:y=20"),
            ("bottom-left", "x=20:y=h-text_h-20"),
        ],
    )
    def test_positions(self, position, xy):
        assert xy in DrawTextFilter("Hi", position=position).to_filter()

    def test_text_is_escaped_and_expansion_disabled(self):
        text = DrawTextFilter("50%: done").to_filter()
        assert text.startswith("drawtext=text='50%\\: done':expansion=none")

    def test_apostrophe_in_text(self):
        text = DrawTextFilter("Don't miss it").to_filter()
        assert text.startswith("drawtext=text='Don'\\\\\\''t miss it':")

    def test_background_box(self):
        text = DrawTextFilter("Hi", background="black@0.5").to_filter()
        assert "box=1:boxcolor=black@0.5:boxborderw=10" in text

    def test_validation(self):
        with pytest.raises(ValueError, match="empty"):
            DrawTextFilter("")
        with pytest.raises(ValueError, match="Unknown position"):
            DrawTextFilter("Hi", position="middle")
        with pytest.raises(ValueError, match="after start"):
            DrawTextFilter("Hi", start=10, end=5)
