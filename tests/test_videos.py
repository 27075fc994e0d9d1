import json

import httpx
import pytest
import respx
from conftest import load_fixture

from vitrine.config import VideoSettings
from vitrine.enrich.videos import VideoAsset, attach_videos, load_bucket_index, load_mirror_index, video_sort_key
from vitrine.ingest.csv_text import parse_csv
from vitrine.ingest.sources import CSVSource
from vitrine.jobs.videos import run_videos
from vitrine.logic.artifact import Artifact, save_artifact
from vitrine.logic.nodes import FolderNode, ProductNode

PUBLIC_URL = "https://videos.example.com"
MIRROR_LOG_URL = "https://sheets.example.com/mirror.csv"


class FakePaginator:
    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        return iter(self.pages)


class FakeS3:
    def __init__(self, pages):
        self.paginator = FakePaginator(pages)

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return self.paginator


def make_artifact() -> Artifact:
    tree = {
        "BAGS": FolderNode(
            children={
                "Tote": ProductNode(drive_link="https://drive.google.com/drive/folders/T"),
                "Clutch": ProductNode(),
            }
        ),
        "HATS": FolderNode(children={"Cap": ProductNode()}),
    }
    return Artifact(brands={"demo": {"name": "Demo"}}, tree=tree, total_products=3)


def test_mirror_index_uses_found_video_rows_only():
    index = load_mirror_index(parse_csv(load_fixture("mirror_log.csv")), PUBLIC_URL + "/")
    assert set(index) == {"bags/tote"}
    assert [v.name for v in index["bags/tote"]] == ["video.mp4", "video1.mp4"]
    assert index["bags/tote"][0].url == "https://videos.example.com/Bags/Tote/video.mp4"


def test_video_sort_key_puts_numbered_videos_first():
    names = ["zebra.mp4", "video10.mp4", "clip.webm", "video2.mp4", "video.mp4"]
    assets = sorted((VideoAsset(key=f"a/{n}", url="") for n in names), key=video_sort_key)
    assert [a.name for a in assets] == ["video.mp4", "video2.mp4", "video10.mp4", "clip.webm", "zebra.mp4"]


def test_bucket_index_groups_by_folder():
    client = FakeS3(
        [
            {"Contents": [{"Key": "Bags/Tote/video1.mp4"}, {"Key": "Bags/Tote/cover.jpg"}]},
            {"Contents": [{"Key": "Bags/Tote/video.MP4"}, {"Key": "root/intro.mp4"}, {"Key": "top.mp4"}]},
            {},
        ]
    )
    index = load_bucket_index(client, "brand-videos", PUBLIC_URL)
    assert client.paginator.calls == [{"Bucket": "brand-videos"}]
    assert set(index) == {"bags/tote"}
    assert [v.key for v in index["bags/tote"]] == ["Bags/Tote/video.MP4", "Bags/Tote/video1.mp4"]


def test_attach_videos_matches_case_insensitively():
    artifact = make_artifact()
    index = {"bags/tote": [VideoAsset(key="Bags/Tote/video.mp4", url=f"{PUBLIC_URL}/Bags/Tote/video.mp4")]}
    stats = attach_videos(artifact, index)

    preview = artifact.tree["BAGS"].children["Tote"].video_preview
    assert preview["videoCount"] == 1
    assert preview["folder"] == "bags/tote"
    assert preview["videos"][0] == {
        "name": "video.mp4",
        "key": "Bags/Tote/video.mp4",
        "url": "https://videos.example.com/Bags/Tote/video.mp4",
    }
    assert artifact.tree["BAGS"].children["Clutch"].video_preview is None
    assert stats.products_found == 3
    assert stats.products_with_videos == 1
    assert stats.total_videos == 1


@pytest.mark.asyncio
async def test_run_videos_updates_artifact(tmp_path):
    public_dir = tmp_path / "public"
    save_artifact(public_dir / "data.json", make_artifact())
    settings = VideoSettings(public_url=PUBLIC_URL, mirror_log_url=MIRROR_LOG_URL, public_dir=public_dir)

    async with respx.mock(assert_all_called=True) as router:
        router.get(MIRROR_LOG_URL).mock(return_value=httpx.Response(200, text=load_fixture("mirror_log.csv")))
        build = await run_videos(settings)

    assert build["source"] == "mirror-log"
    assert build["logRows"] == 5
    assert build["indexedFolders"] == 1
    assert build["productsWithVideos"] == 1
    assert build["totalVideos"] == 2

    data = json.loads((public_dir / "data.json").read_text(encoding="utf-8"))
    tote = data["catalog"]["tree"]["BAGS"]["children"]["Tote"]
    assert [v["name"] for v in tote["videoPreview"]["videos"]] == ["video.mp4", "video1.mp4"]
    assert tote["driveLink"] == "https://drive.google.com/drive/folders/T"
    assert "videoPreview" not in data["catalog"]["tree"]["HATS"]["children"]["Cap"]
    assert data["meta"]["videoBuild"]["publicUrl"] == PUBLIC_URL
    assert data["brands"] == {"demo": {"name": "Demo"}}


@pytest.mark.asyncio
async def test_run_videos_leaves_injected_source_open(tmp_path):
    public_dir = tmp_path / "public"
    save_artifact(public_dir / "data.json", make_artifact())
    settings = VideoSettings(public_url=PUBLIC_URL, mirror_log_url=MIRROR_LOG_URL, public_dir=public_dir)

    async with respx.mock(assert_all_called=True) as router:
        router.get(MIRROR_LOG_URL).mock(return_value=httpx.Response(200, text=load_fixture("mirror_log.csv")))
        session = httpx.AsyncClient()
        await run_videos(settings, source=CSVSource(session=session))
        assert not session.is_closed
        await session.aclose()
