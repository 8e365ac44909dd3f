import pytest


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def jskill_home(tmp_path, monkeypatch):
    home = tmp_path / "jskill-home"
    monkeypatch.setenv("JSKILL_HOME", str(home))
    return home


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"
