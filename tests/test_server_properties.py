from datetime import datetime

import pytest

from core.errors import ServerPropertiesError
from services import server_properties as sp

SCHEDULED = datetime(2024, 5, 17, 14, 30)

PROPERTIES = (
    "#Minecraft server properties\n"
    "enable-command-block=false\n"
    "level-name= world \n"
    "motd=A Minecraft Server\n"
    "server-version=1.20.4\n"
    "max-players=20\n"
)


@pytest.fixture
def props_file(tmp_path):
    path = tmp_path / "server.properties"
    path.write_text(PROPERTIES, encoding="utf-8")
    return path


def test_banner_contains_prefix_and_time():
    banner = sp.shutdown_banner(SCHEDULED, "Hello")
    assert banner == "\\u00a73Hello\\u00a7r\\n\\u00a76Shutdown at 2024-05-17 14:30:00"


def test_apply_banner_rewrites_motd_and_extracts_fields(props_file):
    props = sp.apply_shutdown_banner(props_file, SCHEDULED, "Hello")
    assert props.level_name == "world"
    assert props.server_version == "1.20.4"

    text = props_file.read_text(encoding="utf-8")
    assert "motd=A Minecraft Server" not in text
    assert "motd=\\u00a73Hello\\u00a7r\\n\\u00a76Shutdown at 2024-05-17 14:30:00\n" in text
    assert "level-name= world \n" in text
    assert "server-version=1.20.4\n" in text
    assert "max-players=20\n" in text
    assert not (props_file.parent / "server.properties.tmp").exists()


def test_every_motd_line_is_replaced():
    text = "motd=one\nlevel-name=w\nmotd=two\n"
    out = sp.rewrite_motd(text, "X")
    assert out == "motd=X\nlevel-name=w\nmotd=X\n"


def test_replacement_is_literal():
    # backslashes and group references in the banner are not regex syntax
    out = sp.rewrite_motd("motd=old\n", "\\1 \\u00a7 $0")
    assert out == "motd=\\1 \\u00a7 $0\n"


@pytest.mark.parametrize("missing", ["level-name", "server-version"])
def test_missing_field_is_fatal(tmp_path, missing):
    path = tmp_path / "server.properties"
    lines = [l for l in PROPERTIES.splitlines(True) if not l.startswith(missing)]
    path.write_text("".join(lines), encoding="utf-8")
    with pytest.raises(ServerPropertiesError, match=missing):
        sp.apply_shutdown_banner(path, SCHEDULED)


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(ServerPropertiesError):
        sp.apply_shutdown_banner(tmp_path / "server.properties", SCHEDULED)


def test_failed_rename_leaves_original_intact(props_file, monkeypatch):
    def boom(src, dst):
        raise OSError("disk on fire")

    monkeypatch.setattr(sp.os, "replace", boom)
    props = sp.apply_shutdown_banner(props_file, SCHEDULED)
    # extraction still succeeds, the run goes on with the stale banner
    assert props.server_version == "1.20.4"
    assert props_file.read_text(encoding="utf-8") == PROPERTIES


def test_interrupted_write_never_touches_original(props_file, monkeypatch):
    real_open = open

    class HalfWritten:
        def __init__(self, f):
            self.f = f

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.f.close()
            return False

        def write(self, text):
            self.f.write(text[: len(text) // 2])
            raise OSError("killed mid-write")

    def fake_open(path, mode="r", *args, **kwargs):
        f = real_open(path, mode, *args, **kwargs)
        return HalfWritten(f) if "w" in mode else f

    monkeypatch.setattr("builtins.open", fake_open)
    sp.apply_shutdown_banner(props_file, SCHEDULED)
    monkeypatch.undo()
    assert props_file.read_text(encoding="utf-8") == PROPERTIES


def test_write_atomic_replaces_content(tmp_path):
    path = tmp_path / "server.properties"
    path.write_text("old", encoding="utf-8")
    assert sp.write_atomic(path, "new") is True
    assert path.read_text(encoding="utf-8") == "new"
