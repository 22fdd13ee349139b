"""Tests for capabilities and the Features descriptor."""

from __future__ import annotations

import dataclasses

import pytest

from repo_store._capabilities import Capability, CapabilitySet, Features, HashKind
from repo_store._errors import NotSupported


class TestCapabilitySet:
    def test_construction(self) -> None:
        cs = CapabilitySet({Capability.READ, Capability.WRITE})
        assert len(cs) == 2

    def test_supports(self) -> None:
        cs = CapabilitySet({Capability.READ})
        assert cs.supports(Capability.READ) is True
        assert cs.supports(Capability.WRITE) is False

    def test_contains_and_iter(self) -> None:
        cs = CapabilitySet({Capability.READ, Capability.BATCH})
        assert Capability.BATCH in cs
        assert set(cs) == {Capability.READ, Capability.BATCH}

    def test_require_passes(self) -> None:
        CapabilitySet({Capability.READ}).require(Capability.READ)

    def test_require_raises(self) -> None:
        cs = CapabilitySet({Capability.READ})
        with pytest.raises(NotSupported) as exc_info:
            cs.require(Capability.COPY, backend="github")
        assert exc_info.value.capability == "copy"
        assert exc_info.value.backend == "github"

    def test_immutable(self) -> None:
        cs = CapabilitySet({Capability.READ})
        with pytest.raises(AttributeError, match="immutable"):
            cs._caps = frozenset()  # type: ignore[misc]

    def test_repr_sorted(self) -> None:
        cs = CapabilitySet({Capability.WRITE, Capability.READ})
        assert repr(cs) == "CapabilitySet({READ, WRITE})"


class TestFeatures:
    def test_from_capabilities(self) -> None:
        cs = CapabilitySet({Capability.STAT, Capability.RANGE_READ, Capability.BATCH})
        f = Features.from_capabilities(cs, hashes=frozenset({HashKind.SHA1}))
        assert f.stat and f.range_read and f.batch
        assert not (f.copy or f.move or f.mkdir or f.rmdir or f.streaming)
        assert f.hashes == frozenset({HashKind.SHA1})

    def test_hashes_default_empty(self) -> None:
        f = Features.from_capabilities(CapabilitySet(set()))
        assert f.hashes == frozenset()

    def test_frozen(self) -> None:
        f = Features.from_capabilities(CapabilitySet(set()))
        with pytest.raises(dataclasses.FrozenInstanceError):
            f.copy = True  # type: ignore[misc]
