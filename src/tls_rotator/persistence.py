"""kopf persistence settings that keep key material out of annotations."""

from __future__ import annotations

import hashlib
from typing import Any

import kopf


def digest_data(data: dict[str, Any]) -> dict[str, str]:
    """Replace every secret data value with its SHA-256 digest."""
    return {
        key: "sha256:" + hashlib.sha256((value or "").encode("utf-8")).hexdigest()
        for key, value in data.items()
    }


class DigestingDiffBaseStorage(kopf.AnnotationsDiffBaseStorage):
    """Diff-base storage that records digests instead of secret data.

    kopf keeps the last handled state of an object in an annotation to detect
    changes. For secrets that state includes ``data``; storing digests still
    detects every change without copying private keys into metadata.
    """

    def build(self, *, body: Any, **kwargs: Any) -> Any:
        essence = super().build(body=body, **kwargs)
        data = essence.get("data")
        if data:
            essence = dict(essence)
            essence["data"] = digest_data(data)
        return essence
