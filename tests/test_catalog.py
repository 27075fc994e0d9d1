import json

import httpx
import pytest
import respx
from conftest import PLACEHOLDER, load_fixture

from vitrine.config import BuildSettings
from vitrine.ingest.sources import CSVSource
from vitrine.jobs.build import run_build
from vitrine.logic.artifact import load_artifact
from vitrine.logic.catalog import build_catalog
from vitrine.logic.nodes import FolderNode, ProductNode
from vitrine.logic.report import build_health_report, build_summary_markdown

BRANDS_URL = "https://sheets.example.com/brands.csv"
MASTER_URL = "https://sheets.example.com/master.csv"


@pytest.mark.asyncio
async def test_build_catalog_reports_missing_thumbs(brand_records, master_records, public_dir):
    build = await build_catalog(brand_records, master_records, placeholder=PLACEHOLDER, public_dir=public_dir)

    missing = sorted(m.path for m in build.missing_thumbs)
    assert missing == ["BAGS/Tote", "BAGS/Tote/Clutch"]

    report = build_health_report(build)
    assert report["performance"]["totalBrands"] == 2
    assert report["performance"]["totalProducts"] == 5
    assert report["performance"]["totalCategories"] == 4
    assert report["performance"]["catalogEntries"] == 9
    assert report["quality"]["invalidDriveLinks"] == 1
    assert report["quality"]["missingThumbnails"] == 2
    assert report["details"]["invalidDriveLinks"][0]["driveLink"] == "https://example.com/scarf"
    assert report["sections"]["Trending"] == {"categories": ["HATS"], "totalItems": 1}
    assert report["sections"]["Featured"]["totalItems"] == 4

    root_total = sum(n.count if isinstance(n, FolderNode) else 1 for n in build.tree.values())
    assert root_total == report["performance"]["totalProducts"]


@pytest.mark.asyncio
async def test_summary_lists_categories_by_order(brand_records, master_records, public_dir):
    build = await build_catalog(brand_records, master_records, placeholder=PLACEHOLDER, public_dir=public_dir)
    summary = build_summary_markdown(build)
    assert summary.index("**HATS**") < summary.index("**BAGS**")
    assert "[Order: 1]" in summary
    assert "- **Products:** 5" in summary


@pytest.mark.asyncio
async def test_run_build_writes_artifacts(tmp_path, public_dir):
    settings = BuildSettings(
        brands_csv_url=BRANDS_URL,
        master_csv_url=MASTER_URL,
        placeholder_thumb=PLACEHOLDER,
        public_dir=public_dir,
        build_dir=tmp_path / "build",
        step_summary=tmp_path / "summary.md",
    )
    async with respx.mock(assert_all_called=True) as router:
        router.get(BRANDS_URL).mock(return_value=httpx.Response(200, text=load_fixture("brands.csv")))
        router.get(MASTER_URL).mock(return_value=httpx.Response(200, text=load_fixture("master.csv")))
        await run_build(settings)

    data = json.loads((public_dir / "data.json").read_text(encoding="utf-8"))
    assert set(data) == {"brands", "catalog", "meta"}
    assert data["brands"]["chanel"]["colors"]["primary"] == "#D4AF37"
    assert data["catalog"]["totalProducts"] == 5
    assert data["catalog"]["sectionStats"] == {"Featured": 4, "Trending": 1}
    clutch = data["catalog"]["tree"]["BAGS"]["children"]["Tote"]["children"]["Clutch"]
    assert clutch["isProduct"] is True
    assert data["catalog"]["tree"]["SHOES"]["isProduct"] is True
    assert "children" not in data["catalog"]["tree"]["SHOES"]

    health = json.loads((tmp_path / "build" / "health.json").read_text(encoding="utf-8"))
    assert health["performance"]["totalProducts"] == 5
    assert (tmp_path / "summary.md").read_text(encoding="utf-8").startswith("## Catalog Build Summary")

    artifact = load_artifact(public_dir / "data.json")
    assert isinstance(artifact.tree["HATS"].children["Cap"], ProductNode)
    assert artifact.catalog_extra["sections"] == ["Featured", "Trending"]


@pytest.mark.asyncio
async def test_run_build_aborts_when_a_source_fails(tmp_path, public_dir):
    settings = BuildSettings(
        brands_csv_url=BRANDS_URL,
        master_csv_url=MASTER_URL,
        public_dir=public_dir,
        build_dir=tmp_path / "build",
    )
    async with respx.mock(assert_all_called=False) as router:
        router.get(BRANDS_URL).mock(return_value=httpx.Response(200, text=load_fixture("brands.csv")))
        router.get(MASTER_URL).mock(return_value=httpx.Response(503))
        with pytest.raises(httpx.HTTPStatusError):
            await run_build(settings)
    assert not (public_dir / "data.json").exists()


@pytest.mark.asyncio
async def test_run_build_leaves_injected_source_open(tmp_path, public_dir):
    settings = BuildSettings(
        brands_csv_url=BRANDS_URL,
        master_csv_url=MASTER_URL,
        public_dir=public_dir,
        build_dir=tmp_path / "build",
    )
    async with respx.mock(assert_all_called=True) as router:
        router.get(BRANDS_URL).mock(return_value=httpx.Response(200, text=load_fixture("brands.csv")))
        router.get(MASTER_URL).mock(return_value=httpx.Response(200, text=load_fixture("master.csv")))
        session = httpx.AsyncClient()
        await run_build(settings, source=CSVSource(session=session))
        assert not session.is_closed
        await session.aclose()
