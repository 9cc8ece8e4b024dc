"""Representation of objects stored in a cluster.

A `KubeObject` is a thin typed wrapper around a raw Kubernetes document. The
fields the reconciliation protocol cares about (identity, labels, owner
references and the version token) are lifted out of `metadata`, everything
else is carried opaquely in `body`.
"""

from dataclasses import dataclass, field
from typing import Any

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "NamedResource",
    "KubeObject",
    "parse_raw_obj",
    "build_label_selector",
    "parse_label_selector",
    "selector_matches",
]

# Metadata fields lifted onto KubeObject attributes. Any other metadata key
# is preserved verbatim in `extra_metadata`.
_METADATA_FIELDS = {
    "name",
    "namespace",
    "resourceVersion",
    "uid",
    "labels",
    "annotations",
    "ownerReferences",
}


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class KubeObject(DataClassDictMixin):
    """A kubernetes object as sent to or returned from the API server."""

    kind: str
    """The kind of the object."""

    api_version: str
    """The apiVersion of the object."""

    name: str
    """The name of the object."""

    namespace: str | None = None
    """The namespace of the object, None for cluster scoped objects."""

    resource_version: str | None = None
    """Opaque version token assigned by the API server on every write."""

    uid: str | None = None
    """Unique id assigned by the API server on creation."""

    labels: dict[str, str] | None = None
    """Labels on the object."""

    annotations: dict[str, str] | None = None
    """Annotations on the object."""

    owner_references: list[dict[str, Any]] | None = None
    """References to the objects that own this object."""

    extra_metadata: dict[str, Any] | None = None
    """Any other metadata fields (e.g. creationTimestamp, finalizers)."""

    body: dict[str, Any] = field(default_factory=dict)
    """All top level fields other than apiVersion, kind and metadata."""

    class Config(BaseConfig):
        omit_none = True

    @property
    def resource_id(self) -> NamedResource:
        """Return the identity of this object."""
        return NamedResource(self.kind, self.namespace, self.name)

    @property
    def spec(self) -> dict[str, Any]:
        """Return the spec of the object, empty if it has none."""
        return self.body.get("spec") or {}

    @property
    def match_labels(self) -> dict[str, str]:
        """Return `spec.selector.matchLabels` for workload objects."""
        selector = self.spec.get("selector") or {}
        return dict(selector.get("matchLabels") or {})

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "KubeObject":
        """Parse a KubeObject from a raw kubernetes document."""
        if not (kind := doc.get("kind")):
            raise InputException(f"Invalid object missing kind: {doc}")
        if not (api_version := doc.get("apiVersion")):
            raise InputException(f"Invalid object missing apiVersion: {doc}")
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid object missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid object missing metadata.name: {doc}")
        extra = {k: v for k, v in metadata.items() if k not in _METADATA_FIELDS}
        return cls(
            kind=kind,
            api_version=api_version,
            name=name,
            namespace=metadata.get("namespace"),
            resource_version=metadata.get("resourceVersion"),
            uid=metadata.get("uid"),
            labels=metadata.get("labels"),
            annotations=metadata.get("annotations"),
            owner_references=metadata.get("ownerReferences"),
            extra_metadata=extra or None,
            body={
                k: v
                for k, v in doc.items()
                if k not in ("apiVersion", "kind", "metadata")
            },
        )

    def to_doc(self) -> dict[str, Any]:
        """Render the object as a raw kubernetes document."""
        metadata: dict[str, Any] = dict(self.extra_metadata or {})
        metadata["name"] = self.name
        if self.namespace is not None:
            metadata["namespace"] = self.namespace
        if self.resource_version is not None:
            metadata["resourceVersion"] = self.resource_version
        if self.uid is not None:
            metadata["uid"] = self.uid
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        if self.owner_references:
            metadata["ownerReferences"] = list(self.owner_references)
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            **self.body,
        }


def parse_raw_obj(obj: dict[str, Any]) -> KubeObject:
    """Parse a raw kubernetes document into a KubeObject."""
    return KubeObject.parse_doc(obj)


def build_label_selector(labels: dict[str, str]) -> str:
    """Return an equality based label selector string for a set of labels.

    Label sets are unordered, so the pairs are sorted to keep the selector
    stable for the same set of labels.
    """
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def parse_label_selector(selector: str) -> list[tuple[str, str, str | None]]:
    """Parse a label selector into a list of (key, operator, value) terms.

    Supported operators are `=`, `==`, `!=`, existence (`key`) and
    non-existence (`!key`). Set based selectors are not supported.
    """
    terms: list[tuple[str, str, str | None]] = []
    for raw in selector.split(","):
        if not (term := raw.strip()):
            continue
        if "!=" in term:
            key, value = term.split("!=", 1)
            terms.append((key.strip(), "!=", value.strip()))
        elif "==" in term:
            key, value = term.split("==", 1)
            terms.append((key.strip(), "=", value.strip()))
        elif "=" in term:
            key, value = term.split("=", 1)
            terms.append((key.strip(), "=", value.strip()))
        elif " in " in term or " notin " in term or "(" in term:
            raise InputException(f"Unsupported set based label selector: {term}")
        elif term.startswith("!"):
            terms.append((term[1:].strip(), "!", None))
        else:
            terms.append((term, "exists", None))
    return terms


def selector_matches(labels: dict[str, str] | None, selector: str | None) -> bool:
    """Return True if the labels satisfy the label selector."""
    if not selector:
        return True
    labels = labels or {}
    for key, op, value in parse_label_selector(selector):
        if op == "=" and labels.get(key) != value:
            return False
        if op == "!=" and labels.get(key) == value:
            return False
        if op == "exists" and key not in labels:
            return False
        if op == "!" and key in labels:
            return False
    return True
