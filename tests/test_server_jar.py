import pytest

from core.errors import ServerJarError
from services.server_jar import install_server_jar, version_jar


def test_install_copies_version_jar(tmp_path):
    jars = tmp_path / "jars"
    jars.mkdir()
    (jars / "1.20.4.jar").write_bytes(b"PK\x03\x04fake")
    target = tmp_path / "server.jar"
    target.write_bytes(b"old")

    assert install_server_jar("1.20.4", jars, target) == target
    assert target.read_bytes() == b"PK\x03\x04fake"


def test_missing_version_jar_is_fatal(tmp_path):
    with pytest.raises(ServerJarError, match="1.99"):
        install_server_jar("1.99", tmp_path / "jars", tmp_path / "server.jar")
    assert not (tmp_path / "server.jar").exists()


def test_version_jar_path(tmp_path):
    assert version_jar("1.8.9", tmp_path) == tmp_path / "1.8.9.jar"
