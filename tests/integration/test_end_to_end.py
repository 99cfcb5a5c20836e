import threading

from findex import FindexClient, RejectReason


def _write(root, rel_path, content="x"):
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def test_full_search_pipeline(tmp_path):
    state = tmp_path / "state"
    projects = tmp_path / "projects"
    photos = tmp_path / "photos"
    for rel_path in ("src/main.py", "src/index_store.py", "docs/README.md", "setup.cfg"):
        _write(projects, rel_path)
    for rel_path in ("2023/beach.jpg", "2024/mountain.jpg"):
        _write(photos, rel_path)

    client = FindexClient(data_dir=state)
    client.rebuild_index(projects)
    client.rebuild_index(photos)

    client.change_active_root(projects)
    ranked = [result.path for result in client.search("main")]
    assert ranked[0] == "src/main.py"
    assert all("jpg" not in path for path in ranked)

    client.change_active_root(photos)
    assert {result.path for result in client.search("jpg")} == {
        "2023/beach.jpg",
        "2024/mountain.jpg",
    }
    assert client.read_file("2024/mountain.jpg") == b"x"
    assert client.resolve_download_path("../projects/setup.cfg").reason is RejectReason.TRAVERSAL

    recent = [item.path for item in client.list_recent_roots()]
    assert recent == [str(photos.resolve()), str(projects.resolve())]

    restarted = FindexClient(data_dir=state)
    assert restarted.change_active_root(projects).file_count == 4
    assert restarted.search("rdme")[0].path == "docs/README.md"


def test_searches_run_while_other_root_rebuilds(tmp_path):
    state = tmp_path / "state"
    small = tmp_path / "small"
    large = tmp_path / "large"
    _write(small, "alpha.txt")
    for idx in range(200):
        _write(large, f"dir{idx % 10}/file_{idx}.log")

    client = FindexClient(data_dir=state)
    client.change_active_root(small)
    client.rebuild_index()
    failures: list[str] = []
    stop = threading.Event()

    def _searcher() -> None:
        while not stop.is_set():
            paths = [result.path for result in client.search("alpha")]
            if paths != ["alpha.txt"]:
                failures.append(repr(paths))

    threads = [threading.Thread(target=_searcher) for _ in range(4)]
    for thread in threads:
        thread.start()
    try:
        status = client.rebuild_index(large)
    finally:
        stop.set()
        for thread in threads:
            thread.join(timeout=5)

    assert status.file_count == 200
    assert failures == []
    assert client.active_root == small.resolve()
