# k8s.py
"""Adapters from kubernetes client models to admission object states."""
from __future__ import annotations

from typing import Any

from kubernetes import client

from admission import RawExtension
from objects import Unstructured


def to_unstructured(model: Any) -> Unstructured:
    """Serialize a typed client model (V1ConfigMap, V1Deployment, ...) or a plain dict.

    sanitize_for_serialization drops unset attributes, so a model without
    labels yields an Unstructured whose get_labels() is None.
    """
    obj = client.ApiClient().sanitize_for_serialization(model)
    return Unstructured(obj if isinstance(obj, dict) else {})


def object_state(model: Any) -> RawExtension:
    if model is None:
        return RawExtension()
    return RawExtension(object=to_unstructured(model))
