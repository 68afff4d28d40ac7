"""Tests for pacs/controllers/importing/import_registry.py and executor.py."""
import threading

import pytest

from pacs.controllers.importing import BoundedExecutor, ImportRegistry
from pacs.exceptions import ImportRejected, InvalidPath


@pytest.fixture
def incoming(tmp_path):
    path = tmp_path / 'incoming'
    path.mkdir()
    return path


class TestCanonicalize:
    @pytest.mark.parametrize('path', ['', '   ', None])
    def test_blank_path_rejected(self, path):
        with pytest.raises(InvalidPath):
            ImportRegistry.canonicalize(path)

    def test_missing_path_rejected(self, tmp_path):
        with pytest.raises(InvalidPath):
            ImportRegistry.canonicalize(tmp_path / 'missing')

    def test_equivalent_spellings_collapse(self, incoming):
        expected = str(incoming.resolve())
        assert ImportRegistry.canonicalize(incoming) == expected
        assert ImportRegistry.canonicalize(f'{incoming}/') == expected
        assert ImportRegistry.canonicalize(incoming / '..' / 'incoming') == expected
        assert ImportRegistry.canonicalize(incoming / '.') == expected


class TestAddImport:
    def test_duplicate_request_while_running_is_ignored(self, incoming, blocking_worker):
        registry = ImportRegistry(blocking_worker, BoundedExecutor(max_workers=2, backlog=2))
        root = str(incoming.resolve())
        try:
            assert registry.add_import(incoming) is True
            assert registry.add_import(f'{incoming}/') is False
            assert registry.add_import(incoming / '..' / 'incoming') is False
            assert registry.list_imports() == [f'running: {root}']
        finally:
            blocking_worker.release.set()
            registry.shutdown(wait=True)

        assert registry.list_imports() == [f'done: {root}']
        assert len(blocking_worker.calls) == 1

    def test_concurrent_requests_start_one_job(self, incoming, blocking_worker):
        registry = ImportRegistry(blocking_worker, BoundedExecutor(max_workers=2, backlog=2))
        barrier = threading.Barrier(8)
        results = []
        results_lock = threading.Lock()

        def request():
            barrier.wait()
            started = registry.add_import(incoming)
            with results_lock:
                results.append(started)

        threads = [threading.Thread(target=request) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        blocking_worker.release.set()
        registry.shutdown(wait=True)

        assert results.count(True) == 1
        assert results.count(False) == 7
        assert len(blocking_worker.calls) == 1

    def test_invalid_path_is_not_tracked(self, tmp_path, recording_worker, inline_executor):
        registry = ImportRegistry(recording_worker, inline_executor)
        with pytest.raises(InvalidPath):
            registry.add_import(tmp_path / 'missing')
        assert registry.list_imports() == []

    def test_done_path_is_not_restarted_until_cleanup(self, incoming, recording_worker, inline_executor):
        registry = ImportRegistry(recording_worker, inline_executor)

        assert registry.add_import(incoming) is True
        assert registry.add_import(incoming) is False
        assert registry.cleanup_completed() == 1
        assert registry.add_import(incoming) is True
        assert len(recording_worker.calls) == 2

    def test_failing_worker_still_finishes_job(self, incoming, inline_executor):
        class ExplodingWorker:
            def run(self, info):
                raise RuntimeError('disk on fire')

        registry = ImportRegistry(ExplodingWorker(), inline_executor)
        registry.add_import(incoming)

        info = registry.get_import(incoming).result()
        assert info.finished_at is not None
        assert registry.list_imports() == [f'done: {incoming.resolve()}']


class TestBacklog:
    def test_full_backlog_rejects_and_untracks(self, tmp_path, blocking_worker):
        first = tmp_path / 'first'
        second = tmp_path / 'second'
        first.mkdir()
        second.mkdir()

        registry = ImportRegistry(
            blocking_worker,
            BoundedExecutor(max_workers=1, backlog=0, submit_timeout=0.5)
        )
        try:
            assert registry.add_import(first) is True
            with pytest.raises(ImportRejected):
                registry.add_import(second)
            assert registry.list_imports() == [f'running: {first.resolve()}']

            blocking_worker.release.set()
            registry.get_import(first).result(timeout=5)

            assert registry.add_import(second) is True
        finally:
            blocking_worker.release.set()
            registry.shutdown(wait=True)

    def test_submit_after_shutdown_is_rejected(self):
        executor = BoundedExecutor(max_workers=1, backlog=1)
        executor.shutdown()
        with pytest.raises(ImportRejected):
            executor.submit(lambda: None)

    def test_invalid_pool_size(self):
        with pytest.raises(ValueError):
            BoundedExecutor(max_workers=0)


class TestStatus:
    def test_list_and_cleanup(self, tmp_path, recording_worker, inline_executor):
        registry = ImportRegistry(recording_worker, inline_executor)
        for name in ('a', 'b'):
            (tmp_path / name).mkdir()
            registry.add_import(tmp_path / name)

        assert sorted(registry.list_imports()) == [
            f'done: {(tmp_path / "a").resolve()}',
            f'done: {(tmp_path / "b").resolve()}',
        ]
        assert registry.cleanup_completed() == 2
        assert registry.list_imports() == []
        assert registry.cleanup_completed() == 0

    def test_import_status_carries_counters(self, incoming, recording_worker, inline_executor):
        registry = ImportRegistry(recording_worker, inline_executor)
        registry.add_import(incoming)

        [entry] = registry.import_status()
        assert entry['path'] == str(incoming.resolve())
        assert entry['state'] == 'done'
        assert entry['files_seen'] == 1
        assert entry['imported'] == 0

    def test_get_import_unknown_path(self, tmp_path, recording_worker, inline_executor):
        registry = ImportRegistry(recording_worker, inline_executor)
        assert registry.get_import(tmp_path) is None
        assert registry.get_import(tmp_path / 'missing') is None

    def test_shutdown_stops_executor(self, recording_worker, inline_executor):
        ImportRegistry(recording_worker, inline_executor).shutdown()
        assert inline_executor.shut_down is True
