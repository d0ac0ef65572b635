import io
import zipfile

import pytest

from fakes import fmt
from mediagrab.core.errors import ExtractionError, ExtractorUnavailableError

VIDEO = "https://www.youtube.com/watch?v=abc"
PLAYLIST = "https://www.youtube.com/playlist?list=PL1"

VIDEO_INFO = {
    "title": "My Clip",
    "uploader": "Channel",
    "description": "about",
    "duration": 3725,
    "thumbnails": [{"url": "https://img/1.jpg"}],
    "formats": [
        fmt("22", vcodec="avc1", acodec="mp4a", ext="mp4", height=720, url="https://cdn/22"),
        fmt("251", acodec="opus", ext="webm", abr=160, url="https://cdn/251"),
        fmt("140", acodec="mp4a", ext="m4a", abr=128, url="https://cdn/140"),
    ],
}

PLAYLIST_INFO = {
    "_type": "playlist",
    "title": "Mix",
    "channel": "Curator",
    "entries": [
        {"id": "a", "title": "First", "url": "https://www.youtube.com/watch?v=a", "duration": 65},
        {"title": "Second", "url": "https://www.youtube.com/watch?v=b"},
        {"id": "c"},
    ],
}


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_root_reports_service(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "mediagrab API"


@pytest.mark.asyncio
async def test_preview_single(client, extractor):
    extractor.infos[VIDEO] = VIDEO_INFO
    response = await client.post("/preview", json={"url": VIDEO})

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "video"
    assert data["title"] == "My Clip"
    assert data["author"] == "Channel"
    assert data["duration"] == "1:02:05"
    assert data["thumbnail"] == "https://img/1.jpg"
    assert data["platform"] == "youtube"
    assert data["sourceUrl"] == VIDEO
    assert "audioFormats" not in data


@pytest.mark.asyncio
async def test_preview_audio_lists_quality_options(client, extractor):
    extractor.infos[VIDEO] = VIDEO_INFO
    response = await client.post("/preview", json={"url": VIDEO, "type": "audio"})

    options = response.json()["audioFormats"]
    assert [o["formatId"] for o in options] == ["251", "140"]
    assert options[0]["label"].startswith("Best - 160 kbps")


@pytest.mark.asyncio
async def test_preview_playlist(client, extractor):
    extractor.infos[PLAYLIST] = PLAYLIST_INFO
    response = await client.post("/preview", json={"url": PLAYLIST})

    data = response.json()
    assert data["type"] == "playlist"
    assert data["author"] == "Curator"
    assert data["totalItems"] == 3
    first, second, third = data["items"]
    assert first == {
        "id": "a",
        "title": "First",
        "duration": "1:05",
        "url": "https://www.youtube.com/watch?v=a",
        "selected": False,
    }
    assert second["id"] == "https://www.youtube.com/watch?v=b"
    assert third["title"] == "Untitled"
    assert third["url"] == PLAYLIST


@pytest.mark.asyncio
async def test_preview_requires_url(client):
    response = await client.post("/preview", json={"url": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "URL is required"


@pytest.mark.asyncio
async def test_preview_missing_binary_has_install_help(client, extractor):
    extractor.infos[VIDEO] = ExtractorUnavailableError("yt-dlp: No such file")
    response = await client.post("/preview", json={"url": VIDEO})

    assert response.status_code == 503
    detail = response.json()["detail"]
    assert "yt-dlp" in detail["error"]
    assert detail["help"]["env"] == "YTDLP_BINARY_PATH=/path/to/yt-dlp"


@pytest.mark.asyncio
async def test_preview_failure_is_500(client, extractor):
    extractor.infos[VIDEO] = ExtractionError("Video unavailable")
    response = await client.post("/preview", json={"url": VIDEO})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch preview: Video unavailable"


@pytest.mark.asyncio
async def test_preview_error_is_localized(client, extractor):
    response = await client.post("/preview", json={}, headers={"Accept-Language": "ja"})
    assert response.status_code == 400
    assert response.json()["detail"] != "URL is required"


@pytest.mark.asyncio
async def test_download_with_format_id(client, extractor):
    extractor.infos[VIDEO] = VIDEO_INFO
    extractor.files[VIDEO] = b"opus-bytes"
    response = await client.get("/download", params={"url": VIDEO, "kind": "audio", "formatId": "251"})

    assert response.status_code == 200
    assert response.content == b"opus-bytes"
    assert response.headers["content-type"] == "audio/webm"
    assert response.headers["content-length"] == "10"
    assert 'filename="My%20Clip.webm"' in response.headers["content-disposition"]
    assert extractor.file_calls == [(VIDEO, "251")]


@pytest.mark.asyncio
async def test_download_requires_url(client):
    response = await client.get("/download")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_download_missing_ffmpeg_is_503(client, extractor, fallback):
    extractor.infos[VIDEO] = VIDEO_INFO
    extractor.files[VIDEO] = ExtractionError("Requested format is not available")
    fallback.result = ExtractionError("ERROR: You have requested merging but ffmpeg is not installed")

    response = await client.get("/download", params={"url": VIDEO})
    assert response.status_code == 503
    assert "ffmpeg" in response.json()["detail"]


@pytest.mark.asyncio
async def test_download_empty_payload_is_500(client, extractor):
    extractor.infos[VIDEO] = VIDEO_INFO
    extractor.files[VIDEO] = b""

    response = await client.get("/download", params={"url": VIDEO})
    assert response.status_code == 500
    assert "empty" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize("urls", [[], [VIDEO], ["  ", VIDEO], "abc", None])
async def test_zip_needs_two_urls(client, urls):
    response = await client.post("/download-zip", json={"urls": urls, "kind": "video"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_zip_streams_entries_in_order(client, extractor):
    urls = [f"https://youtu.be/{n}" for n in ("2", "1", "3")]
    for url in urls:
        extractor.infos[url] = {"title": f"Track {url[-1]}", "filesize": 4}
        extractor.files[url] = b"data"

    response = await client.post("/download-zip", json={"urls": urls, "kind": "audio"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["x-total-size"] == "12"
    assert "playlist.zip" in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["Track 2.mp3", "Track 1.mp3", "Track 3.mp3"]


@pytest.mark.asyncio
async def test_zip_without_sizes_omits_total(client, extractor):
    urls = ["https://youtu.be/a", "https://youtu.be/b"]
    for url in urls:
        extractor.infos[url] = {"title": url[-1]}

    response = await client.post("/download-zip", json={"urls": urls})
    assert response.status_code == 200
    assert "x-total-size" not in response.headers


@pytest.mark.asyncio
async def test_zip_all_unresolvable_is_500(client):
    response = await client.post("/download-zip", json={"urls": ["https://a.example", "https://b.example"]})
    assert response.status_code == 500
    assert response.json()["detail"].startswith("ZIP download failed")


@pytest.mark.asyncio
async def test_direct_url_single(client, extractor):
    extractor.infos[VIDEO] = VIDEO_INFO
    response = await client.post("/download-url", json={"url": VIDEO, "kind": "audio"})

    assert response.status_code == 200
    assert response.json() == {"directUrl": "https://cdn/251", "filename": "My Clip.webm"}


@pytest.mark.asyncio
async def test_direct_url_batch_tolerates_failures(client, extractor):
    good = ["https://youtu.be/1", "https://youtu.be/3"]
    for url in good:
        extractor.infos[url] = VIDEO_INFO

    response = await client.post(
        "/download-url",
        json={"urls": [good[0], "https://youtu.be/broken", good[1]], "kind": "video"},
    )

    assert response.status_code == 200
    items = response.json()["items"]
    assert len(items) == 3
    assert items[1] == {"directUrl": "", "filename": ""}
    assert items[0]["directUrl"] == "https://cdn/22"
    assert items[2]["filename"] == "My Clip.mp4"


@pytest.mark.asyncio
async def test_direct_url_without_usable_format(client, extractor):
    extractor.infos[VIDEO] = {"title": "x", "formats": [fmt("1", vcodec="avc1")]}
    response = await client.post("/download-url", json={"url": VIDEO})

    assert response.status_code == 500
    assert "No downloadable format URL found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_direct_url_requires_input(client):
    response = await client.post("/download-url", json={"kind": "video"})
    assert response.status_code == 400
