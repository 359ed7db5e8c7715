# gate.py
"""Admission gate for ARM-managed resources.

Objects carrying the managed-by=arm marker (as a label or an annotation) are
mirrored from ARM; only whitelisted users may create or update them.
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from admission import (
    CREATE,
    HTTP_INTERNAL_SERVER_ERROR,
    UPDATE,
    AdmissionRequest,
    GroupVersionKind,
    Operation,
    Verdict,
    allowed,
    denied,
    errored,
)
from config import whitelist
from logs import vlog
from objects import DecodeError, StringMap, get_labels_and_annotations

MANAGED_BY_ARM_KEY = "managed-by"
MANAGED_BY_ARM_VALUE = "arm"

RESOURCE_DENIED_FORMAT = (
    'resource {kind} "{name}" in namespace "{namespace}" is managed by ARM '
    "and can only be modified by whitelisted users"
)

# Only these mutate state we care about; everything else passes untouched.
GUARDED_OPERATIONS = frozenset({CREATE, UPDATE})

Metadata = Tuple[StringMap, StringMap]  # (labels, annotations)


def managed_by_arm(m: StringMap) -> bool:
    if not m:
        return False
    return m.get(MANAGED_BY_ARM_KEY) == MANAGED_BY_ARM_VALUE


def resource_denied_reason(kind: GroupVersionKind, name: str, namespace: str) -> str:
    return RESOURCE_DENIED_FORMAT.format(kind=kind, name=name, namespace=namespace)


def evaluate(
    operation: Operation,
    old_metadata: Optional[Metadata],
    new_metadata: Optional[Metadata],
    requester: str,
    whitelisted_users: Iterable[str],
    kind: GroupVersionKind,
    name: str,
    namespace: str,
) -> Verdict:
    """Decide over already-extracted metadata.

    Only the new state is checked for the marker; old_metadata is accepted so
    callers pass both states, but stripping the marker in the same request
    is not caught here.
    """
    if operation not in GUARDED_OPERATIONS:
        return allowed("")

    labels, annotations = new_metadata or (None, None)
    if not managed_by_arm(labels) and not managed_by_arm(annotations):
        return allowed("")

    if requester in whitelist(whitelisted_users):
        return allowed("")
    return denied(resource_denied_reason(kind, name, namespace))


class ManagedResourceValidator:
    """Validates create/update requests for ARM-managed resources.

    Stateless apart from the frozen whitelist, so a single instance can
    serve concurrent requests.
    """

    def __init__(self, whitelisted_users: Optional[Iterable[str]] = None):
        self.whitelisted_users = whitelist(whitelisted_users)

    def handle(self, req: AdmissionRequest) -> Verdict:
        fields = dict(
            user=req.user_info.username,
            groups=req.user_info.groups,
            operation=req.operation,
            GVK=req.request_kind or req.kind,
            subResource=req.sub_resource,
            namespacedName=req.namespaced_name,
        )

        if req.operation not in GUARDED_OPERATIONS:
            vlog(3, "operation is not guarded, allowing", **fields)
            return allowed("")

        try:
            new_metadata = get_labels_and_annotations(req.object)
            old_metadata = get_labels_and_annotations(req.old_object)
        except DecodeError as e:
            vlog(2, "failed to get labels and annotations", err=e, **fields)
            return errored(HTTP_INTERNAL_SERVER_ERROR, e)

        verdict = evaluate(
            req.operation,
            old_metadata,
            new_metadata,
            req.user_info.username,
            self.whitelisted_users,
            req.kind,
            req.name,
            req.namespace,
        )
        if verdict.allowed:
            vlog(3, "managed resource request allowed", **fields)
        else:
            vlog(2, "managed resource request denied", **fields)
        return verdict
