import json
from pathlib import Path

from bandcamp_expand.core.batch_manager import BatchManager, discover_archives
from bandcamp_expand.models.record import ArchiveState


def _bandcamp_album(make_zip, source_dir: Path, artist: str, album: str, tracks=2):
    entries = {
        f"{artist} - {album} - {n:02d} Song.flac": f"{album} {n}".encode()
        for n in range(1, tracks + 1)
    }
    entries["cover.jpg"] = b"jpeg"
    return make_zip(source_dir / f"{artist} - {album}.zip", entries)


def test_discover_archives_is_flat_and_case_insensitive(source_dir: Path) -> None:
    (source_dir / "a.zip").write_bytes(b"")
    (source_dir / "B.ZIP").write_bytes(b"")
    (source_dir / "notes.txt").write_bytes(b"")
    (source_dir / "folder.zip").mkdir()
    (source_dir / "nested").mkdir()
    (source_dir / "nested" / "c.zip").write_bytes(b"")

    found = discover_archives(source_dir, ".zip")

    assert [p.name for p in found] == ["B.ZIP", "a.zip"]


def test_end_to_end_expands_and_deletes_archive(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    archive = make_zip(
        source_dir / "Artist X - Album Y.zip",
        {
            "Artist X - Album Y - 01 Song.flac": b"first",
            "Artist X - Album Y - 02 Song.flac": b"second",
        },
    )

    stats = BatchManager(make_config()).execute()

    album_dir = library_dir / "FLAC" / "Artist X" / "Album Y"
    assert (album_dir / "01 Song.flac").read_bytes() == b"first"
    assert (album_dir / "02 Song.flac").read_bytes() == b"second"
    assert not archive.exists()
    assert not (source_dir / "auto" / "FLAC" / "Artist X").exists()
    assert stats.completed == {"Artist X - Album Y.zip"}
    assert stats.files_written == 2
    assert stats.all_succeeded


def test_aac_archives_go_to_aac_folder(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    make_zip(source_dir / "Band - Record.zip", {"Band - Record - 01 Intro.m4a": b"x"})

    BatchManager(make_config()).execute()

    assert (library_dir / "AAC" / "Band" / "Record" / "01 Intro.m4a").is_file()


def test_malformed_name_is_left_in_place(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    archive = make_zip(source_dir / "NoSeparatorHere.zip", {"01.flac": b"x"})

    stats = BatchManager(make_config()).execute()

    assert archive.exists()
    assert "NoSeparatorHere.zip" not in stats.completed
    assert "MalformedFilenameError" in stats.failed["NoSeparatorHere.zip"]
    assert not library_dir.exists()
    assert not stats.all_succeeded


def test_unknown_codec_is_left_in_place(
    make_zip, make_config, source_dir: Path
) -> None:
    archive = make_zip(source_dir / "Band - Artbook.zip", {"page1.jpg": b"x"})

    stats = BatchManager(make_config()).execute()

    assert archive.exists()
    assert "UnknownCodecError" in stats.failed["Band - Artbook.zip"]
    result = stats.results[0]
    assert result.state is ArchiveState.FAILED
    assert result.failed_stage is ArchiveState.DISCOVERED


def test_corrupt_archive_does_not_stop_batch(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    (source_dir / "Broken - Download.zip").write_bytes(b"truncated")
    _bandcamp_album(make_zip, source_dir, "Fine", "Album")

    stats = BatchManager(make_config(max_workers=2)).execute()

    assert stats.completed == {"Fine - Album.zip"}
    assert "ArchiveReadError" in stats.failed["Broken - Download.zip"]
    assert (source_dir / "Broken - Download.zip").exists()
    assert (library_dir / "FLAC" / "Fine" / "Album" / "01 Song.flac").is_file()


def test_many_archives_in_parallel(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    albums = [("Band", "First"), ("Band", "Second"), ("Other", "Third")]
    for artist, album in albums:
        _bandcamp_album(make_zip, source_dir, artist, album, tracks=3)
    make_zip(source_dir / "NoSeparatorHere.zip", {"01.flac": b"x"})

    stats = BatchManager(make_config(max_workers=4)).execute()

    assert stats.completed == {f"{a} - {b}.zip" for a, b in albums}
    assert set(stats.failed) == {"NoSeparatorHere.zip"}
    for artist, album in albums:
        album_dir = library_dir / "FLAC" / artist / album
        assert sorted(p.name for p in album_dir.iterdir()) == [
            "01 Song.flac",
            "02 Song.flac",
            "03 Song.flac",
            "cover.jpg",
        ]
    assert not list((source_dir / "auto").rglob("*.flac"))


def test_merges_into_existing_library(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    album_dir = library_dir / "FLAC" / "Band" / "Record"
    album_dir.mkdir(parents=True)
    (album_dir / "01 Song.flac").write_bytes(b"Record 1")  # same size, kept
    (album_dir / "02 Song.flac").write_bytes(b"cut")  # truncated, replaced
    (album_dir / "notes.txt").write_bytes(b"mine")
    _bandcamp_album(make_zip, source_dir, "Band", "Record")

    stats = BatchManager(make_config()).execute()

    assert stats.completed == {"Band - Record.zip"}
    assert (album_dir / "01 Song.flac").read_bytes() == b"Record 1"
    assert (album_dir / "02 Song.flac").read_bytes() == b"Record 2"
    assert (album_dir / "notes.txt").read_bytes() == b"mine"


def test_retry_tolerates_leftover_staging(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    leftover = source_dir / "auto" / "FLAC" / "Band" / "Record"
    leftover.mkdir(parents=True)
    (leftover / "01 Song.flac").write_bytes(b"Record 1")
    _bandcamp_album(make_zip, source_dir, "Band", "Record")

    stats = BatchManager(make_config()).execute()

    assert stats.completed == {"Band - Record.zip"}
    assert stats.files_written == 2  # 02 Song.flac and cover.jpg
    album_dir = library_dir / "FLAC" / "Band" / "Record"
    assert (album_dir / "01 Song.flac").is_file()
    assert (album_dir / "02 Song.flac").is_file()


def test_dry_run_touches_nothing(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    archive = _bandcamp_album(make_zip, source_dir, "Band", "Record")

    stats = BatchManager(make_config(dry_run=True)).execute()

    assert archive.exists()
    assert stats.planned == {"Band - Record.zip"}
    assert not stats.completed
    assert not library_dir.exists()
    assert not (source_dir / "auto").exists()
    assert stats.results[0].destination == library_dir / "FLAC" / "Band" / "Record"


def test_verify_rejects_bogus_audio(
    make_zip, make_config, source_dir: Path, library_dir: Path
) -> None:
    archive = _bandcamp_album(make_zip, source_dir, "Band", "Record")

    stats = BatchManager(make_config(verify=True)).execute()

    assert archive.exists()
    assert "FileIntegrityError" in stats.failed["Band - Record.zip"]
    assert stats.results[0].failed_stage is ArchiveState.STAGED
    # staged files are set aside for inspection, nothing reaches the library
    kept = source_dir / "auto" / "failed" / "FLAC" / "Band" / "Record"
    assert (kept / "01 Song.flac").exists()
    assert not (source_dir / "auto" / "FLAC" / "Band").exists()
    assert not library_dir.exists()


def test_verify_accepts_valid_audio(
    make_zip, make_config, source_dir: Path, library_dir: Path, valid_flac: bytes
) -> None:
    archive = make_zip(
        source_dir / "Band - Record.zip",
        {"Band - Record - 01 Song.flac": valid_flac, "cover.jpg": b"jpeg"},
    )

    stats = BatchManager(make_config(verify=True)).execute()

    assert stats.completed == {"Band - Record.zip"}
    assert not archive.exists()
    album_dir = library_dir / "FLAC" / "Band" / "Record"
    assert (album_dir / "01 Song.flac").read_bytes() == valid_flac
    assert (album_dir / "cover.jpg").is_file()


def test_rejected_album_never_follows_a_later_merge(
    make_zip, make_config, source_dir: Path, library_dir: Path, valid_flac: bytes
) -> None:
    make_zip(source_dir / "Band - Bad.zip", {"Band - Bad - 01 Broken.flac": b"junk"})
    first = BatchManager(make_config(verify=True)).execute()
    assert "FileIntegrityError" in first.failed["Band - Bad.zip"]

    make_zip(
        source_dir / "Band - Good.zip", {"Band - Good - 01 Fine.flac": valid_flac}
    )
    second = BatchManager(make_config(verify=True)).execute()

    assert second.completed == {"Band - Good.zip"}
    assert "FileIntegrityError" in second.failed["Band - Bad.zip"]
    assert (library_dir / "FLAC" / "Band" / "Good" / "01 Fine.flac").is_file()
    assert not (library_dir / "FLAC" / "Band" / "Bad").exists()
    kept = source_dir / "auto" / "failed" / "FLAC" / "Band" / "Bad"
    assert (kept / "01 Broken.flac").read_bytes() == b"junk"


def test_same_artist_failure_and_success_in_one_run(
    make_zip, make_config, source_dir: Path, library_dir: Path, valid_flac: bytes
) -> None:
    make_zip(source_dir / "Band - Bad.zip", {"Band - Bad - 01 Broken.flac": b"junk"})
    make_zip(
        source_dir / "Band - Good.zip", {"Band - Good - 01 Fine.flac": valid_flac}
    )

    stats = BatchManager(make_config(verify=True, max_workers=2)).execute()

    assert stats.completed == {"Band - Good.zip"}
    assert set(stats.failed) == {"Band - Bad.zip"}
    assert sorted(p.name for p in (library_dir / "FLAC" / "Band").iterdir()) == [
        "Good"
    ]


def test_empty_source_directory(make_config) -> None:
    stats = BatchManager(make_config()).execute()
    assert stats.total_archives == 0
    assert stats.all_succeeded


def test_json_event_log(
    make_zip, make_config, source_dir: Path, tmp_path: Path
) -> None:
    _bandcamp_album(make_zip, source_dir, "Band", "Record")
    make_zip(source_dir / "NoSeparatorHere.zip", {"01.flac": b"x"})
    log_dir = tmp_path / "logs"

    BatchManager(make_config(log_dir=log_dir)).execute()

    (log_file,) = log_dir.glob("bandcamp_expand_*.jsonl")
    events = [json.loads(line) for line in log_file.read_text().splitlines()]
    by_name = {e["event"]: e for e in events}
    assert by_name["session_started"]["total_archives"] == 2
    assert by_name["archive_completed"]["archive"] == "Band - Record.zip"
    assert by_name["archive_completed"]["codec"] == "FLAC"
    assert by_name["archive_failed"]["archive"] == "NoSeparatorHere.zip"
    assert by_name["session_completed"]["completed"] == 1
    assert by_name["session_completed"]["failed"] == 1
