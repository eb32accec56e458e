"""Error taxonomy tests: every failure is a ``SynthesisError`` with diagnosable context."""

from __future__ import annotations

import pytest

from appcat_runtime.domain.errors import (
    InvalidFormat,
    InvalidPath,
    MissingField,
    NotFound,
    PathNotFound,
    SynthesisError,
    TypeMismatch,
)


@pytest.mark.parametrize(
    "error",
    [
        MissingField("chart.name"),
        PathNotFound("spec.a", "a"),
        TypeMismatch("a.b", "a", expected="mapping", actual="int"),
        InvalidPath("", "empty path"),
        InvalidFormat("bad"),
        NotFound("absent"),
    ],
)
def test_all_errors_share_the_base(error: SynthesisError) -> None:
    assert isinstance(error, SynthesisError)


def test_missing_field_detail_is_appended() -> None:
    error = MissingField("connectionSecret", "not found in service config")
    assert error.field == "connectionSecret"
    assert str(error) == "required field connectionSecret is missing: not found in service config"


def test_type_mismatch_carries_kinds() -> None:
    error = TypeMismatch("master.y", "master", expected="mapping", actual="str")
    assert (error.path, error.segment, error.expected, error.actual) == ("master.y", "master", "mapping", "str")


def test_invalid_path_carries_reason() -> None:
    error = InvalidPath("a..b", "empty segment")
    assert error.reason == "empty segment"
    assert "a..b" in str(error)
