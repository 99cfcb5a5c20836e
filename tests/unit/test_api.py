import pytest

from findex import api as api_module
from findex.config import recent_roots_path
from findex.services.path_service import RejectReason
from findex.services.roots_service import RecentRootsRegistry


def _tree(root, *names):
    root.mkdir(parents=True, exist_ok=True)
    for name in names:
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(name, encoding="utf-8")
    return root


@pytest.fixture()
def client(tmp_path):
    return api_module.FindexClient(data_dir=tmp_path / "state")


def test_client_starts_without_active_root(client):
    assert client.active_root is None
    assert client.status() is None
    assert client.search("x") == []
    assert client.list_recent_roots() == []


def test_rebuild_without_root_requires_active_root(client):
    with pytest.raises(api_module.FindexError):
        client.rebuild_index()


def test_change_active_root_rejects_invalid_directories(client, tmp_path):
    with pytest.raises(api_module.FindexError):
        client.change_active_root(tmp_path / "missing")

    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(api_module.FindexError):
        client.change_active_root(file_path)


def test_index_search_and_registry(client, tmp_path):
    root = _tree(tmp_path / "data", "reports/q1.csv", "notes.md")

    client.change_active_root(root)
    status = client.rebuild_index()

    assert status.file_count == 2
    assert client.active_root == root.resolve()
    results = client.search("q1")
    assert [result.to_dict() for result in results] == [
        {"path": "reports/q1.csv", "name": "q1.csv"}
    ]
    recent = client.list_recent_roots()
    assert [item.path for item in recent] == [str(root.resolve())]
    assert recent[0].file_count == 2
    assert recent[0].last_indexed is not None


def test_registry_and_snapshots_live_under_data_dir(tmp_path):
    state = tmp_path / "state"
    root = _tree(tmp_path / "data", "a.txt")
    client = api_module.FindexClient(data_dir=state)

    client.rebuild_index(root)

    assert (state / "recent_roots.json").exists()
    assert len(list((state / "indices").glob("*.json"))) == 1
    with api_module.data_dir_context(state):
        reloaded = RecentRootsRegistry.from_file(recent_roots_path())
    assert [item.path for item in reloaded.entries()] == [str(root.resolve())]


def test_new_client_restores_snapshot(tmp_path):
    state = tmp_path / "state"
    root = _tree(tmp_path / "data", "a.txt", "b/c.txt")
    api_module.FindexClient(data_dir=state).rebuild_index(root)

    fresh = api_module.FindexClient(data_dir=state)
    status = fresh.change_active_root(root)

    assert status.file_count == 2
    assert status.indexed_at is not None
    assert {result.path for result in fresh.search("")} == {"a.txt", "b/c.txt"}


def test_search_validates_top(client, tmp_path):
    root = _tree(tmp_path / "data", "a1.txt", "a2.txt", "a3.txt")
    client.change_active_root(root)
    client.rebuild_index()

    assert len(client.search("a", top=2)) == 2
    assert len(client.search("a", top=0)) == 3
    with pytest.raises(api_module.FindexError):
        client.search("a", top=-1)


def test_purge_reports_removed_count(client, tmp_path):
    client.rebuild_index(_tree(tmp_path / "one", "a.txt"))
    client.rebuild_index(_tree(tmp_path / "two", "b.txt"))

    message = client.purge_all_indices()

    assert "2 removed" in message
    assert not list((tmp_path / "state" / "indices").glob("*.json"))


def test_download_requires_active_root(client):
    resolution = client.resolve_download_path("a.txt")

    assert resolution.reason is RejectReason.NO_ACTIVE_ROOT
    with pytest.raises(api_module.FindexError, match="no active root"):
        client.read_file("a.txt")


def test_read_file_within_active_root(client, tmp_path):
    root = _tree(tmp_path / "data", "reports/q1.csv")
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")
    client.change_active_root(root)

    assert client.read_file("reports/q1.csv") == b"reports/q1.csv"
    with pytest.raises(api_module.FindexError, match="parent directory"):
        client.read_file("../secret.txt")
    with pytest.raises(api_module.FindexError, match="file not found"):
        client.read_file("reports/missing.csv")


def test_set_data_dir_updates_both_locations(tmp_path, monkeypatch):
    import findex.cache as cache
    import findex.config as config

    monkeypatch.setattr(cache, "CACHE_DIR", cache.CACHE_DIR)
    monkeypatch.setattr(config, "CONFIG_DIR", config.CONFIG_DIR)
    monkeypatch.setattr(config, "CONFIG_FILE", config.CONFIG_FILE)

    api_module.set_data_dir(tmp_path / "base")

    assert cache.CACHE_DIR == (tmp_path / "base").resolve()
    assert config.CONFIG_DIR == (tmp_path / "base").resolve()


def test_status_payload_shape(client, tmp_path):
    root = _tree(tmp_path / "data", "a.txt")

    pending = client.change_active_root(root).to_dict()
    assert pending == {"root": str(root.resolve()), "fileCount": 0, "timestamp": None}

    done = client.rebuild_index().to_dict()
    assert done["fileCount"] == 1
    assert done["timestamp"] is not None
