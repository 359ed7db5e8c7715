#!/usr/bin/env python3
"""tools/check_request.py

Evaluate a captured AdmissionReview against the managed-resource gate,
without a cluster or a webhook server.

Usage:
  WHITELISTED_USERS=fleet1p,system:serviceaccount:fleet:hub \
    python3 tools/check_request.py review.yaml

  kubectl ... -o json | python3 tools/check_request.py -

Prints the AdmissionReview response as YAML. Exit code 0 when allowed,
1 when denied or errored, 2 when the document is not an AdmissionReview.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Allow executing from tools/ without installing as a package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from admission import AdmissionRequest, GroupVersionKind, RawExtension, UserInfo  # noqa: E402
from config import split_csv  # noqa: E402
from gate import ManagedResourceValidator  # noqa: E402


def _gvk(d: Optional[Dict[str, Any]]) -> Optional[GroupVersionKind]:
    if not d:
        return None
    return GroupVersionKind(group=d.get("group", ""), version=d.get("version", ""), kind=d.get("kind", ""))


def _raw(obj: Any) -> RawExtension:
    # Re-encode so the gate sees what the apiserver would send; YAML timestamps become strings.
    if obj is None:
        return RawExtension()
    return RawExtension(raw=json.dumps(obj, default=str).encode())


def request_from_review(review: Dict[str, Any]) -> AdmissionRequest:
    req = review.get("request") if isinstance(review, dict) else None
    if not isinstance(req, dict):
        raise ValueError("document has no `request` object; is it an AdmissionReview?")
    user = req.get("userInfo", {}) or {}
    return AdmissionRequest(
        uid=req.get("uid", ""),
        operation=req.get("operation", ""),
        kind=_gvk(req.get("kind")) or GroupVersionKind(),
        request_kind=_gvk(req.get("requestKind")),
        sub_resource=req.get("subResource", ""),
        name=req.get("name", ""),
        namespace=req.get("namespace", ""),
        user_info=UserInfo(username=user.get("username", ""), groups=list(user.get("groups", []) or [])),
        object=_raw(req.get("object")),
        old_object=_raw(req.get("oldObject")),
    )


def main(argv: list[str]) -> int:
    path = argv[1] if len(argv) > 1 else "-"
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")

    try:
        req = request_from_review(yaml.safe_load(text))
    except (yaml.YAMLError, ValueError) as e:
        print(f"[check] {e}", file=sys.stderr)
        return 2

    validator = ManagedResourceValidator(split_csv(os.environ.get("WHITELISTED_USERS", "")))
    verdict = validator.handle(req)

    out = {
        "apiVersion": "admission.k8s.io/v1",
        "kind": "AdmissionReview",
        "response": verdict.to_response(req.uid),
    }
    yaml.safe_dump(out, sys.stdout, sort_keys=False)
    return 0 if verdict.allowed else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
