import threading
import time

from litewire import Container


class SlowService:
    built = 0

    def __init__(self):
        time.sleep(0.01)
        SlowService.built += 1


class Consumer:
    def __init__(self, service: SlowService):
        self.service = service


def test_shared_container_builds_dependency_once_across_threads():
    c = Container()
    barrier = threading.Barrier(8)
    results = []
    errors = []

    def worker():
        barrier.wait()
        try:
            results.append(c.get(Consumer).service)
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(results) == 8
    assert all(service is results[0] for service in results)
    assert SlowService.built == 1
