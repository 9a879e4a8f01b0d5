import pytest

from batch_watermark.core.config import AppConfig
from batch_watermark.core.errors import EmptyBatchError, InvalidInputError
from batch_watermark.core.models import SourceAsset
from batch_watermark.core.session import WatermarkSession


@pytest.fixture
def session():
    return WatermarkSession()


def test_intake_filters_non_images(session, make_asset):
    report = session.add_assets([make_asset("a.png"), SourceAsset("notes.txt", b"hi", "text/plain")])
    assert [a.name for a in report.accepted] == ["a.png"]
    assert report.rejected == ["notes.txt"]
    assert session.can_generate


def test_intake_all_invalid_raises_and_keeps_existing(session, make_asset):
    session.add_assets([make_asset("a.png")])
    with pytest.raises(InvalidInputError) as exc:
        session.add_assets([SourceAsset("doc.pdf", b"%PDF", "application/pdf")])
    assert exc.value.names == ["doc.pdf"]
    assert [a.name for a in session.uploaded] == ["a.png"]


def test_cannot_generate_when_empty(session):
    assert not session.can_generate


def test_add_paths(session, tmp_path, png_bytes):
    p = tmp_path / "x.png"
    p.write_bytes(png_bytes)
    session.add_paths([str(p)])
    assert session.uploaded[0].mime_type == "image/png"


def test_process_replaces_previous_results(session, make_asset, corrupt_asset):
    session.add_assets([make_asset("a.png"), corrupt_asset])
    report = session.process("", 24)
    assert report.ok == 1 and report.failed == 1
    assert [r.source_name for r in session.processed] == ["a.png"]
    assert [f.source_name for f in session.failures] == ["broken.png"]
    session.process("again", 30)
    assert len(session.processed) == 1


def test_build_style_uses_config(make_asset):
    s = WatermarkSession(AppConfig(default_text="ACME", font_size_min=12, font_size_max=50, font_size_default=20))
    style = s.build_style("  ", 500)
    assert style.text == "ACME"
    assert style.font_size_px == 50
    assert s.build_style("x", 1).font_size_px == 12


def test_download_all_empty(session, tmp_path):
    with pytest.raises(EmptyBatchError):
        session.download_all(str(tmp_path))


def test_downloads(session, make_asset, tmp_path):
    session.add_assets([make_asset("a.png"), make_asset("b.jpg", fmt="JPEG")])
    session.process("Test", 24)
    paths = session.download_all(str(tmp_path))
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a_watermarked.png", "b_watermarked.jpg"]
    assert len(paths) == 2
    single = session.download_single("a.png", str(tmp_path))
    assert single.endswith("a_watermarked_1.png")
    assert session.download_single("missing.png", str(tmp_path)) is None


def test_clear(session, make_asset):
    session.add_assets([make_asset("a.png")])
    session.process("Test", 24)
    session.clear()
    assert session.uploaded == [] and session.processed == [] and session.failures == []
    assert not session.can_generate
