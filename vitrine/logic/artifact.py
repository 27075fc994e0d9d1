"""Reading and writing the ``data.json`` catalog artifact."""

from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any

from vitrine.errors import ArtifactError
from vitrine.logic.nodes import Tree, tree_from_dict, tree_to_dict

logger = logging.getLogger(__name__)

DATA_FILENAME = "data.json"


@dataclass(slots=True)
class Artifact:
    brands: dict[str, Any]
    tree: Tree
    total_products: int
    catalog_extra: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Artifact":
        if not isinstance(data, dict):
            raise ArtifactError("Artifact root is not an object")
        catalog = data.get("catalog")
        if not isinstance(catalog, dict) or "tree" not in catalog:
            raise ArtifactError("Invalid data.json structure: missing catalog.tree")
        meta = data.get("meta") or {}
        if not isinstance(meta, dict):
            raise ArtifactError("Invalid data.json structure: meta is not an object")
        return cls(
            brands=data.get("brands") or {},
            tree=tree_from_dict(catalog["tree"]),
            total_products=int(catalog.get("totalProducts") or 0),
            catalog_extra={k: v for k, v in catalog.items() if k not in {"tree", "totalProducts"}},
            meta=meta,
            extra={k: v for k, v in data.items() if k not in {"brands", "catalog", "meta"}},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "brands": self.brands,
            "catalog": {
                "totalProducts": self.total_products,
                "tree": tree_to_dict(self.tree),
                **self.catalog_extra,
            },
            "meta": self.meta,
        }
        data.update(self.extra)
        return data


def write_json(path: pathlib.Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def load_artifact(path: pathlib.Path) -> Artifact:
    logger.info("Loading %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"{path} is not valid JSON: {exc}") from exc
    return Artifact.from_dict(data)


def save_artifact(path: pathlib.Path, artifact: Artifact) -> None:
    write_json(path, artifact.to_dict())
    logger.info("Saved %s", path)
