# admission.py
"""Admission request / verdict types consumed and produced by the gate.

The transport layer decodes the AdmissionReview envelope and hands us an
AdmissionRequest; we hand back a Verdict it can render with to_response().
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol

Operation = str  # CREATE | UPDATE | DELETE | CONNECT | anything the apiserver adds later

CREATE: Operation = "CREATE"
UPDATE: Operation = "UPDATE"
DELETE: Operation = "DELETE"
CONNECT: Operation = "CONNECT"

Outcome = Literal["ALLOW", "DENY", "ERROR"]

HTTP_OK = 200
HTTP_FORBIDDEN = 403
HTTP_INTERNAL_SERVER_ERROR = 500


class HasMetadata(Protocol):
    """Anything that can report its labels and annotations."""

    def get_labels(self) -> Optional[Dict[str, str]]: ...

    def get_annotations(self) -> Optional[Dict[str, str]]: ...


@dataclass(frozen=True)
class GroupVersionKind:
    group: str = ""
    version: str = ""
    kind: str = ""

    def __str__(self) -> str:
        if not self.group and not self.version:
            return self.kind
        if not self.group:
            return f"{self.version}, Kind={self.kind}"
        return f"{self.group}/{self.version}, Kind={self.kind}"


@dataclass(frozen=True)
class UserInfo:
    username: str = ""
    groups: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RawExtension:
    """Object state of a request: a materialized object, raw bytes, or nothing.

    When both are set the materialized object wins, matching the apiserver
    machinery this mirrors.
    """

    object: Optional[HasMetadata] = None
    raw: Optional[bytes] = None

    def is_empty(self) -> bool:
        return self.object is None and not self.raw


@dataclass(frozen=True)
class AdmissionRequest:
    operation: Operation
    kind: GroupVersionKind
    name: str = ""
    namespace: str = ""
    user_info: UserInfo = field(default_factory=UserInfo)
    object: RawExtension = field(default_factory=RawExtension)
    old_object: RawExtension = field(default_factory=RawExtension)
    request_kind: Optional[GroupVersionKind] = None
    sub_resource: str = ""
    uid: str = ""

    @property
    def namespaced_name(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class Verdict:
    outcome: Outcome
    code: int
    reason: str = ""
    message: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome == "ALLOW"

    def to_response(self, uid: str = "") -> Dict[str, Any]:
        """Render as the `response` member of an admission.k8s.io/v1 AdmissionReview."""
        status: Dict[str, Any] = {"code": self.code}
        if self.reason:
            status["reason"] = self.reason
        if self.message:
            status["message"] = self.message
        return {"uid": uid, "allowed": self.allowed, "status": status}


def allowed(reason: str = "") -> Verdict:
    return Verdict(outcome="ALLOW", code=HTTP_OK, reason=reason)


def denied(reason: str) -> Verdict:
    return Verdict(outcome="DENY", code=HTTP_FORBIDDEN, reason=reason)


def errored(code: int, err: BaseException) -> Verdict:
    return Verdict(outcome="ERROR", code=code, message=str(err))
