"""End-to-end runs of the command-line front end."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import cli
from conftest import make_zip, read_zip


@pytest.fixture
def packs(write_pack):
    base = write_pack("packs/base.zip", make_zip({"assets/a.png": b"base", "assets/b.png": b"b"}))
    top = write_pack("packs/top.zip", make_zip({"assets/a.png": b"top"}))
    return base, top


def _run(tmp_path: Path, *args: str) -> None:
    cli.main(["--config-path", str(tmp_path / "none.toml"), *args])


def test_merge_writes_named_archive(tmp_path: Path, packs) -> None:
    base, top = packs
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    _run(tmp_path, str(base), str(top), "--name", "Night Vision", "--description", "Dark", "--output", str(out_dir))

    files = read_zip((out_dir / "NightVision.zip").read_bytes())
    assert files["assets/a.png"] == b"top"
    assert files["assets/b.png"] == b"b"
    assert json.loads(files["pack.mcmeta"])["pack"]["description"] == "Dark"


def test_directory_argument_and_icon(tmp_path: Path, packs) -> None:
    icon = tmp_path / "icon.png"
    icon.write_bytes(b"\x89PNG icon")
    output = tmp_path / "merged.zip"

    _run(tmp_path, str(tmp_path / "packs"), "--icon", str(icon), "--output", str(output))

    files = read_zip(output.read_bytes())
    assert files["pack.png"] == b"\x89PNG icon"
    assert files["assets/a.png"] == b"top"


def test_config_file_supplies_packs_and_metadata(tmp_path: Path, packs) -> None:
    config = tmp_path / "merger.toml"
    config.write_text(
        '[pack]\nname = "Configured"\npack_format = 22\n\n[merge]\npacks = ["packs/top.zip", "packs/base.zip"]\n',
        encoding="utf-8",
    )

    cli.main(["--config-path", str(config), "--output", str(tmp_path)])

    files = read_zip((tmp_path / "Configured.zip").read_bytes())
    assert files["assets/a.png"] == b"base"
    assert json.loads(files["pack.mcmeta"])["pack"]["pack_format"] == 22


def test_dry_run_writes_nothing(tmp_path: Path, packs, capsys: pytest.CaptureFixture[str]) -> None:
    base, top = packs
    output = tmp_path / "merged.zip"

    _run(tmp_path, str(base), str(top), "--output", str(output), "--dry-run", "--verbose-conflict")

    assert not output.exists()
    captured = capsys.readouterr().out
    assert "assets/a.png: top.zip (overrides base.zip)" in captured
    assert "Dry run active" in captured


def test_export_report(tmp_path: Path, packs) -> None:
    base, top = packs

    _run(tmp_path, str(base), str(top), "--output", str(tmp_path / "m.zip"), "--export-path", str(tmp_path / "rep"))

    assert (tmp_path / "rep" / "merge_report.xlsx").exists()


def test_no_packs_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        _run(tmp_path)


def test_invalid_archive_exits_without_output(tmp_path: Path, write_pack) -> None:
    broken = write_pack("broken.zip", b"not a zip at all")
    output = tmp_path / "merged.zip"

    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, str(broken), "--output", str(output))

    assert "Please try again" in str(exc_info.value)
    assert not output.exists()


def test_oversized_pack_declined_without_yes(tmp_path: Path, packs, monkeypatch: pytest.MonkeyPatch) -> None:
    base, top = packs
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    output = tmp_path / "merged.zip"

    with pytest.raises(SystemExit):
        _run(tmp_path, str(base), str(top), "--max-size-mb", "0.00001", "--output", str(output))

    assert not output.exists()


def test_oversized_pack_accepted_with_yes(tmp_path: Path, packs) -> None:
    base, top = packs
    output = tmp_path / "merged.zip"

    _run(tmp_path, str(base), str(top), "--max-size-mb", "0.00001", "--yes", "--output", str(output))

    assert read_zip(output.read_bytes())["assets/a.png"] == b"top"


def test_config_size_limit_applies_without_flag(tmp_path: Path, packs, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "merger.toml"
    config.write_text('[merge]\npacks = ["packs/base.zip"]\nmax_input_mb = 0.00001\n', encoding="utf-8")
    asked = []
    monkeypatch.setattr("builtins.input", lambda prompt: asked.append(prompt) or "n")
    output = tmp_path / "merged.zip"

    with pytest.raises(SystemExit):
        cli.main(["--config-path", str(config), "--output", str(output)])

    assert len(asked) == 1
    assert "base.zip" in asked[0]
    assert not output.exists()


def test_quiet_run_prints_no_progress(tmp_path: Path, packs, capsys: pytest.CaptureFixture[str]) -> None:
    base, top = packs
    output = tmp_path / "merged.zip"

    _run(tmp_path, str(base), str(top), "--output", str(output), "--quiet")

    captured = capsys.readouterr()
    assert output.exists()
    assert "[progress]" not in captured.out
    assert "[info]" not in captured.out
