# objects.py
"""Label/annotation extraction from admission object states.

Only metadata is ever decoded: PartialObjectMetadata keeps name, namespace,
labels and annotations and ignores the rest of the document, so the gate
works for any resource type without knowing its schema.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from admission import RawExtension

StringMap = Optional[Dict[str, str]]


class DecodeError(ValueError):
    """Raw object bytes could not be turned into object metadata."""


def _string_map(value: Any, field: str) -> StringMap:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise DecodeError(f"metadata.{field}: expected map of strings, got {type(value).__name__}")
    for k, v in value.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise DecodeError(f"metadata.{field}[{k!r}]: expected string value, got {type(v).__name__}")
    return dict(value)


def _string(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"metadata.{field}: expected string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class PartialObjectMetadata:
    name: str = ""
    namespace: str = ""
    labels: StringMap = None
    annotations: StringMap = None

    def get_labels(self) -> StringMap:
        return self.labels

    def get_annotations(self) -> StringMap:
        return self.annotations

    @classmethod
    def from_dict(cls, doc: Any) -> "PartialObjectMetadata":
        if not isinstance(doc, dict):
            raise DecodeError(f"cannot decode {type(doc).__name__} into object metadata: expected a JSON object")
        meta = doc.get("metadata")
        if meta is None:
            return cls()
        if not isinstance(meta, dict):
            raise DecodeError(f"metadata: expected object, got {type(meta).__name__}")
        return cls(
            name=_string(meta.get("name"), "name"),
            namespace=_string(meta.get("namespace"), "namespace"),
            labels=_string_map(meta.get("labels"), "labels"),
            annotations=_string_map(meta.get("annotations"), "annotations"),
        )


class Unstructured:
    """A dict-backed object, the shape list/get calls return from the API."""

    def __init__(self, obj: Optional[Dict[str, Any]] = None):
        self.object: Dict[str, Any] = obj if obj is not None else {}

    def _metadata(self) -> Dict[str, Any]:
        meta = self.object.get("metadata")
        if meta is None:
            return {}
        if not isinstance(meta, dict):
            raise DecodeError(f"metadata: expected object, got {type(meta).__name__}")
        return meta

    def get_labels(self) -> StringMap:
        return _string_map(self._metadata().get("labels"), "labels")

    def get_annotations(self) -> StringMap:
        return _string_map(self._metadata().get("annotations"), "annotations")

    def _set_metadata_field(self, key: str, value: StringMap) -> None:
        meta = self.object.setdefault("metadata", {})
        if value is None:
            meta.pop(key, None)
        else:
            meta[key] = dict(value)

    def set_labels(self, labels: StringMap) -> None:
        self._set_metadata_field("labels", labels)

    def set_annotations(self, annotations: StringMap) -> None:
        self._set_metadata_field("annotations", annotations)


def decode_partial_metadata(data: bytes) -> PartialObjectMetadata:
    """Strictly decode raw JSON bytes; trailing data or a non-object is an error."""
    try:
        doc = json.loads(data)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"error decoding object from json: {e}") from e
    return PartialObjectMetadata.from_dict(doc)


def get_labels_and_annotations(raw: RawExtension) -> Tuple[StringMap, StringMap]:
    """Return (labels, annotations) of an object state.

    A materialized object is read as-is, raw bytes are decoded into
    PartialObjectMetadata, and an empty state has no metadata at all.
    Absent maps come back as None.
    """
    if raw.is_empty():
        return None, None
    if raw.object is not None:
        return raw.object.get_labels(), raw.object.get_annotations()
    meta = decode_partial_metadata(raw.raw)
    return meta.labels, meta.annotations
