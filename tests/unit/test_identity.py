"""Unit tests for identifier generators."""

from __future__ import annotations

import threading

import pytest

from inherit_map.core.enums import IdentifierKind, ScalarKind
from inherit_map.core.exceptions import InvalidIdentifierError
from inherit_map.core.identity import (
    IdentifierGenerator,
    SequenceIdentifierGenerator,
    UuidIdentifierGenerator,
    create_generator,
)


class TestSequenceIdentifierGenerator:
    def test_monotonic(self) -> None:
        gen = SequenceIdentifierGenerator()
        assert [gen.next_id() for _ in range(3)] == [1, 2, 3]

    def test_start(self) -> None:
        assert SequenceIdentifierGenerator(100).next_id() == 100

    def test_observe_advances(self) -> None:
        gen = SequenceIdentifierGenerator()
        gen.observe(6)
        assert gen.next_id() == 7

    def test_observe_never_rewinds(self) -> None:
        gen = SequenceIdentifierGenerator(10)
        gen.observe(3)
        gen.observe(None)
        assert gen.peek() == 10

    def test_observe_rejects_non_integer(self) -> None:
        gen = SequenceIdentifierGenerator()
        for value in ("5", 2.5, True):
            with pytest.raises(InvalidIdentifierError, match="integer"):
                gen.observe(value)
        assert gen.peek() == 1

    def test_concurrent_ids_unique(self) -> None:
        gen = SequenceIdentifierGenerator()
        results: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            ids = [gen.next_id() for _ in range(500)]
            with lock:
                results.extend(ids)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 4000
        assert len(set(results)) == 4000
        assert gen.peek() == 4001

    def test_satisfies_protocol(self) -> None:
        assert isinstance(SequenceIdentifierGenerator(), IdentifierGenerator)
        assert SequenceIdentifierGenerator().kind is ScalarKind.INTEGER


class TestUuidIdentifierGenerator:
    def test_text_ids(self) -> None:
        gen = UuidIdentifierGenerator()
        first, second = gen.next_id(), gen.next_id()
        assert gen.kind is ScalarKind.TEXT
        assert isinstance(first, str) and len(first) == 32
        assert first != second

    def test_satisfies_protocol(self) -> None:
        assert isinstance(UuidIdentifierGenerator(), IdentifierGenerator)


class TestCreateGenerator:
    def test_sequence(self) -> None:
        gen = create_generator(IdentifierKind.SEQUENCE, 5)
        assert isinstance(gen, SequenceIdentifierGenerator)
        assert gen.next_id() == 5

    def test_uuid(self) -> None:
        assert isinstance(create_generator(IdentifierKind.UUID), UuidIdentifierGenerator)
