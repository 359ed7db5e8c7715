from __future__ import annotations

import pytest

from admission import RawExtension
from objects import (
    DecodeError,
    PartialObjectMetadata,
    Unstructured,
    decode_partial_metadata,
    get_labels_and_annotations,
)


def test_object_with_labels_and_annotations() -> None:
    obj = PartialObjectMetadata(labels={"foo": "bar"}, annotations={"baz": "qux"})
    labels, annotations = get_labels_and_annotations(RawExtension(object=obj))
    assert labels == {"foo": "bar"}
    assert annotations == {"baz": "qux"}


def test_object_with_no_labels_or_annotations() -> None:
    labels, annotations = get_labels_and_annotations(RawExtension(object=PartialObjectMetadata()))
    assert labels is None
    assert annotations is None


def test_unstructured_absent_fields_are_none() -> None:
    u = Unstructured({"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cm"}})
    assert get_labels_and_annotations(RawExtension(object=u)) == (None, None)


def test_unstructured_set_none_removes_field() -> None:
    u = Unstructured()
    u.set_labels({"a": "b"})
    u.set_labels(None)
    assert u.object == {"metadata": {}}
    assert u.get_labels() is None


def test_extraction_does_not_mutate_object() -> None:
    doc = {"metadata": {"labels": {"a": "b"}}}
    labels, _ = get_labels_and_annotations(RawExtension(object=Unstructured(doc)))
    labels["a"] = "changed"
    assert doc == {"metadata": {"labels": {"a": "b"}}}


def test_empty_state_has_no_metadata() -> None:
    assert get_labels_and_annotations(RawExtension()) == (None, None)
    assert RawExtension().is_empty() is True


def test_raw_bytes_are_decoded() -> None:
    raw = b'{"apiVersion": "v1", "kind": "Secret", "metadata": {"name": "s", "namespace": "default", "labels": {"x": "y"}}, "data": {"k": "dg=="}}'
    labels, annotations = get_labels_and_annotations(RawExtension(raw=raw))
    assert labels == {"x": "y"}
    assert annotations is None

    meta = decode_partial_metadata(raw)
    assert (meta.name, meta.namespace) == ("s", "default")


def test_materialized_object_wins_over_raw() -> None:
    ext = RawExtension(object=PartialObjectMetadata(labels={"from": "object"}), raw=b"garbage")
    assert get_labels_and_annotations(ext) == ({"from": "object"}, None)


@pytest.mark.parametrize(
    "raw, detail",
    [
        (b'"invalid"}', "Extra data"),
        (b"{", "error decoding object from json"),
        (b'"just a string"', "expected a JSON object"),
        (b'{"metadata": []}', "metadata: expected object"),
        (b'{"metadata": {"labels": {"a": 1}}}', "metadata.labels"),
        (b'{"metadata": {"annotations": "nope"}}', "metadata.annotations"),
        (b'{"metadata": {"name": 7}}', "metadata.name"),
    ],
)
def test_decode_failures(raw: bytes, detail: str) -> None:
    with pytest.raises(DecodeError) as exc:
        get_labels_and_annotations(RawExtension(raw=raw))
    assert detail in str(exc.value)


def test_unstructured_with_wrong_typed_labels_fails() -> None:
    u = Unstructured({"metadata": {"labels": ["a", "b"]}})
    with pytest.raises(DecodeError):
        get_labels_and_annotations(RawExtension(object=u))


def test_deeply_nested_document_is_a_decode_error() -> None:
    raw = b'{"spec": ' + b"[" * 200000 + b"]" * 200000 + b"}"
    with pytest.raises(DecodeError) as exc:
        get_labels_and_annotations(RawExtension(raw=raw))
    assert "error decoding object from json" in str(exc.value)


def test_unstructured_with_non_object_metadata_fails() -> None:
    u = Unstructured({"metadata": ["not", "a", "map"]})
    with pytest.raises(DecodeError) as exc:
        get_labels_and_annotations(RawExtension(object=u))
    assert "metadata: expected object" in str(exc.value)


def test_zero_length_bytes_are_an_empty_state() -> None:
    assert RawExtension(raw=b"").is_empty() is True
    assert get_labels_and_annotations(RawExtension(raw=b"")) == (None, None)
