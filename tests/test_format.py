from fakes import fmt
from mediagrab.models.internal import Format, MediaKind
from mediagrab.services.format import FormatSelector, audio_quality_options, content_type_for


def formats(*raw):
    return [Format.from_ytdlp(r) for r in raw]


def test_best_video_prefers_muxed_by_height_then_bitrate():
    candidates = formats(
        fmt("v1080", vcodec="avc1", height=1080, tbr=4000),
        fmt("m720", vcodec="avc1", acodec="mp4a", height=720, tbr=1500),
        fmt("m720b", vcodec="avc1", acodec="mp4a", height=720, tbr=2500),
        fmt("a", acodec="opus", abr=160),
    )
    assert FormatSelector.best_video(candidates).id == "m720b"


def test_best_video_falls_back_to_video_only():
    candidates = formats(
        fmt("a", acodec="opus", abr=160),
        fmt("v480", vcodec="vp9", height=480),
        fmt("v1080", vcodec="vp9", height=1080),
    )
    chosen = FormatSelector.best_video(candidates)
    assert chosen.id == "v1080"
    assert chosen.video_codec_present


def test_best_video_last_resort_is_first_format():
    candidates = formats(fmt("x"), fmt("y"))
    assert FormatSelector.best_video(candidates).id == "x"
    assert FormatSelector.best_video([]) is None


def test_best_audio_never_picks_video_when_audio_only_exists():
    candidates = formats(
        fmt("m", vcodec="avc1", acodec="mp4a", abr=320),
        fmt("a128", acodec="opus", abr=128),
        fmt("a160", acodec="opus", abr=160),
    )
    chosen = FormatSelector.best_audio(candidates)
    assert chosen.id == "a160"
    assert not chosen.video_codec_present


def test_best_audio_fallbacks():
    with_audio = formats(fmt("v", vcodec="avc1"), fmt("m", vcodec="avc1", acodec="mp4a"))
    assert FormatSelector.best_audio(with_audio).id == "m"

    silent = formats(fmt("v1", vcodec="avc1"), fmt("v2", vcodec="vp9"))
    assert FormatSelector.best_audio(silent).id == "v1"


def test_codec_none_string_means_absent():
    f = Format.from_ytdlp(fmt("x", vcodec="none", acodec="mp4a"))
    assert f.is_audio_only
    assert not f.is_muxed


def test_selection_is_deterministic_on_ties():
    candidates = formats(
        fmt("first", vcodec="avc1", acodec="mp4a", height=720, tbr=1000),
        fmt("second", vcodec="avc1", acodec="mp4a", height=720, tbr=1000),
    )
    picks = {FormatSelector.best_for(MediaKind.VIDEO, candidates).id for _ in range(10)}
    assert picks == {"first"}


def test_strict_selection_prefers_containers():
    candidates = formats(
        fmt("webm", vcodec="vp9", acodec="opus", ext="webm", height=1080),
        fmt("mp4", vcodec="avc1", acodec="mp4a", ext="mp4", height=720),
        fmt("opus", acodec="opus", ext="webm", abr=160),
        fmt("m4a", acodec="mp4a", ext="m4a", abr=128),
    )
    assert FormatSelector.strict_for(MediaKind.VIDEO, candidates).id == "mp4"
    assert FormatSelector.strict_for(MediaKind.AUDIO, candidates).id == "m4a"


def test_strict_selection_returns_none_without_candidates():
    candidates = formats(fmt("v", vcodec="avc1", height=720))
    assert FormatSelector.strict_for(MediaKind.VIDEO, candidates) is None
    assert FormatSelector.strict_for(MediaKind.AUDIO, candidates) is None


def test_audio_quality_menu_keeps_top_three():
    candidates = formats(*[
        fmt(f"a{abr}", acodec="mp4a", ext="m4a", abr=abr)
        for abr in (128, 320, 64, 256, 192)
    ])
    options = audio_quality_options(candidates)

    assert [o.format_id for o in options] == ["a320", "a256", "a192"]
    assert [o.label.split(" - ")[0] for o in options] == ["Best", "Better", "Good"]
    assert options[0].label == "Best - 320 kbps • M4A"


def test_audio_quality_menu_dedups_and_shows_size():
    candidates = formats(
        fmt("a", acodec="mp4a", ext="m4a", abr=160, filesize=3 * 1024 * 1024),
        fmt("a", acodec="mp4a", ext="m4a", abr=160),
        fmt("v", vcodec="avc1", acodec="mp4a", abr=320),
    )
    options = audio_quality_options(candidates)

    assert len(options) == 1
    assert options[0].label == "Best - 160 kbps • M4A • 3.0 MB"


def test_content_type_mapping():
    assert content_type_for("webm", MediaKind.AUDIO) == "audio/webm"
    assert content_type_for("m4a", MediaKind.AUDIO) == "audio/mp4"
    assert content_type_for("aac", MediaKind.AUDIO) == "audio/aac"
    assert content_type_for("flac", MediaKind.AUDIO) == "audio/mpeg"
    assert content_type_for("mkv", MediaKind.VIDEO) == "video/x-matroska"
    assert content_type_for("webm", MediaKind.VIDEO) == "video/webm"
    assert content_type_for("unknown", MediaKind.VIDEO) == "video/mp4"
    assert content_type_for(None, MediaKind.VIDEO) == "video/mp4"
