import re
import threading
from datetime import date

from sqlmodel import Session, select

from storefront.exceptions import ConflictError, InsufficientStockError
from storefront.models import Order
from storefront.services import order_service

TODAY = date(2026, 10, 19)


def run_concurrently(engine, requests):
    """Fire every request at once, each in its own session and thread."""
    barrier = threading.Barrier(len(requests))
    results = [None] * len(requests)

    def worker(index, request):
        barrier.wait()
        with Session(engine) as session:
            try:
                order = order_service.place_order(session, request, today=TODAY)
                results[index] = order.order_number
            except Exception as exc:
                results[index] = exc

    threads = [
        threading.Thread(target=worker, args=(i, r)) for i, r in enumerate(requests)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    return results


def test_concurrent_checkouts_never_oversell(engine, seed_product, read_stock, make_request):
    camera = seed_product(stock=3)
    requests = [make_request([(camera.id, 3)]) for _ in range(6)]

    results = run_concurrently(engine, requests)

    placed = [r for r in results if isinstance(r, str)]
    rejected = [r for r in results if isinstance(r, Exception)]

    assert len(placed) == 1
    assert len(rejected) == 5
    assert all(isinstance(e, (InsufficientStockError, ConflictError)) for e in rejected)
    assert read_stock(camera.id) == 0

    with Session(engine) as session:
        assert len(session.exec(select(Order)).all()) == 1


def test_concurrent_orders_get_unique_numbers(engine, seed_product, read_stock, make_request):
    camera = seed_product(stock=100)
    requests = [make_request([(camera.id, 1)]) for _ in range(8)]

    results = run_concurrently(engine, requests)

    assert all(isinstance(r, str) for r in results), results
    assert len(set(results)) == 8
    assert all(re.fullmatch(r"ORD-20261019-\d{4}", r) for r in results)
    # writers serialize, so the sequence has no gaps
    assert sorted(results) == [f"ORD-20261019-{i:04d}" for i in range(1, 9)]
    assert read_stock(camera.id) == 92
