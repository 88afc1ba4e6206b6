"""Tests for link pipeline domain entities."""

from __future__ import annotations

import dataclasses

import pytest

from hubstream.domain.entities import (
    EntryMeta,
    HopKind,
    LinkSource,
    ResolvedLink,
    SourceEntry,
    StreamDescriptor,
    StreamRequest,
)
from hubstream.domain.exceptions import DecodeError, NetworkError, ResolutionError


class TestEntryMeta:
    def test_defaults(self) -> None:
        meta = EntryMeta()
        assert meta.title == ""
        assert meta.size_bytes == 0
        assert meta.height_px == 0

    def test_rejects_non_canonical_height(self) -> None:
        with pytest.raises(ValueError, match="non-canonical"):
            EntryMeta(height_px=1000)

    def test_from_dict_tolerates_missing_fields(self) -> None:
        meta = EntryMeta.from_dict({"title": "x"})
        assert meta == EntryMeta(title="x")


class TestSourceEntry:
    def test_meta_mirrors_entry(self) -> None:
        entry = SourceEntry(
            title="A.2160p.mkv",
            redirect_href="https://r.test/?id=1",
            hop_kind=HopKind.DRIVE,
            size_bytes=10,
            height_px=2160,
        )
        assert entry.meta == EntryMeta(title="A.2160p.mkv", size_bytes=10, height_px=2160)

    def test_is_frozen(self) -> None:
        entry = SourceEntry(title="x", redirect_href="h", hop_kind=HopKind.CLOUD)
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.title = "y"  # type: ignore[misc]


class TestResolvedLink:
    def test_dict_shape(self) -> None:
        link = ResolvedLink(
            source=LinkSource.PIXEL_SERVER,
            url="https://px.test/api/file/abc",
            meta=EntryMeta(title="t", size_bytes=5, height_px=720),
        )
        assert link.to_dict() == {
            "source": "PixelServer",
            "url": "https://px.test/api/file/abc",
            "meta": {"title": "t", "size_bytes": 5, "height_px": 720},
        }

    def test_from_dict_rejects_unknown_source(self) -> None:
        with pytest.raises(ValueError):
            ResolvedLink.from_dict({"source": "Mega", "url": "https://m.test"})


class TestStreamDescriptor:
    def test_to_dict_includes_quality(self) -> None:
        desc = StreamDescriptor(
            name="4KHDHub - FSL 1080p",
            title="Movie.mkv\n2.1 GB",
            url="https://fsl.test/f",
            binge_group_key="4khdhub-FSL",
            quality_label="1080p",
        )
        assert desc.to_dict() == {
            "name": "4KHDHub - FSL 1080p",
            "title": "Movie.mkv\n2.1 GB",
            "url": "https://fsl.test/f",
            "behaviorHints": {"bingeGroup": "4khdhub-FSL"},
            "quality": "1080p",
        }

    def test_to_dict_omits_missing_quality(self) -> None:
        desc = StreamDescriptor(
            name="4KHDHub - Direct",
            title="x\n0 B",
            url="https://d.test",
            binge_group_key="4khdhub-Direct",
        )
        assert "quality" not in desc.to_dict()


class TestStreamRequest:
    def test_is_series(self) -> None:
        assert StreamRequest("1399", "series", 1, 2).is_series
        assert not StreamRequest("550", "movie").is_series


class TestExceptions:
    def test_hierarchy(self) -> None:
        assert issubclass(NetworkError, ResolutionError)
        assert issubclass(DecodeError, ResolutionError)

    def test_decode_error_keeps_stage(self) -> None:
        err = DecodeError("rot13", "boom")
        assert err.stage == "rot13"
        assert "rot13" in str(err)

    def test_network_error_message(self) -> None:
        err = NetworkError("https://x.test", 3, "ConnectError")
        assert err.attempts == 3
        assert "3 attempts" in str(err)
