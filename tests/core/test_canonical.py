# tests/core/test_canonical.py
"""Tests for canonical JSON and stable hashing."""

import math
from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import PurePosixPath, PureWindowsPath

import pytest

from assetforge.core.canonical import canonical_json, stable_hash


class TestCanonicalJson:
    def test_keys_sorted_no_whitespace(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_paths_use_forward_slashes(self) -> None:
        assert canonical_json(PureWindowsPath("Assets\\hero\\skin.png")) == canonical_json(PurePosixPath("Assets/hero/skin.png"))

    def test_naive_datetime_treated_as_utc(self) -> None:
        naive = datetime(2024, 1, 1, 12, 0)
        aware = datetime(2024, 1, 1, 13, 0, tzinfo=timezone(timedelta(hours=1)))

        assert canonical_json(naive) == canonical_json(aware) == canonical_json(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))

    def test_sets_are_order_independent(self) -> None:
        assert canonical_json({"b", "a", "c"}) == canonical_json(frozenset({"c", "a", "b"})) == '["a","b","c"]'

    def test_bytes_and_decimal(self) -> None:
        assert canonical_json(b"\x00") == '{"__bytes__":"AA=="}'
        assert canonical_json(Decimal("1.50")) == '"1.50"'

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, Decimal("NaN")])
    def test_non_finite_rejected(self, value: object) -> None:
        with pytest.raises(ValueError, match="non-finite"):
            canonical_json({"x": value})


class TestStableHash:
    def test_same_data_same_hash(self) -> None:
        assert stable_hash({"a": 1, "b": [1, 2]}) == stable_hash({"b": [1, 2], "a": 1})

    def test_different_data_different_hash(self) -> None:
        assert stable_hash(["/a", "/b"]) != stable_hash(["/b", "/a"])

    def test_sha256_hex(self) -> None:
        digest = stable_hash("x")

        assert len(digest) == 64
        int(digest, 16)
