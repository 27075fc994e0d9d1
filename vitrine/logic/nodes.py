"""Catalog tree nodes and their JSON form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from vitrine.errors import ArtifactError


@dataclass(slots=True)
class ProductNode:
    drive_link: str = ""
    thumbnail: str = ""
    section: str | None = None
    category: str | None = None
    preview_files: list[dict[str, Any]] | None = None
    preview: dict[str, Any] | None = None
    video_preview: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"isProduct": True, "driveLink": self.drive_link, "thumbnail": self.thumbnail}
        if self.section is not None:
            data["section"] = self.section
        if self.category is not None:
            data["category"] = self.category
        if self.preview_files is not None:
            data["previewFiles"] = self.preview_files
        if self.preview is not None:
            data["preview"] = self.preview
        if self.video_preview is not None:
            data["videoPreview"] = self.video_preview
        data.update(self.extra)
        return data


@dataclass(slots=True)
class FolderNode:
    thumbnail: str = ""
    children: dict[str, "Node"] = field(default_factory=dict)
    count: int = 0
    top_order: int | None = None
    drive_link: str | None = None
    section: str | None = None
    category: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "thumbnail": self.thumbnail,
            "children": tree_to_dict(self.children),
            "count": self.count,
        }
        if self.top_order is not None:
            data["topOrder"] = self.top_order
        if self.drive_link:
            data["driveLink"] = self.drive_link
        if self.section is not None:
            data["section"] = self.section
        if self.category is not None:
            data["category"] = self.category
        data.update(self.extra)
        return data

    def to_product(self) -> ProductNode:
        return ProductNode(
            drive_link=self.drive_link or "",
            thumbnail=self.thumbnail,
            section=self.section,
            category=self.category,
            extra=dict(self.extra),
        )


Node = Union[FolderNode, ProductNode]
Tree = dict[str, Node]

_PRODUCT_KEYS = {"isProduct", "driveLink", "thumbnail", "section", "category", "previewFiles", "preview", "videoPreview"}
_FOLDER_KEYS = {"thumbnail", "children", "count", "topOrder", "driveLink", "section", "category"}


def tree_to_dict(tree: Tree) -> dict[str, Any]:
    return {key: node.to_dict() for key, node in tree.items()}


def node_from_dict(data: Any, path: str = "") -> Node:
    if not isinstance(data, dict):
        raise ArtifactError(f"Catalog node {path or '<root>'} is not an object")
    if data.get("isProduct"):
        return ProductNode(
            drive_link=data.get("driveLink") or "",
            thumbnail=data.get("thumbnail") or "",
            section=data.get("section"),
            category=data.get("category"),
            preview_files=data.get("previewFiles"),
            preview=data.get("preview"),
            video_preview=data.get("videoPreview"),
            extra={k: v for k, v in data.items() if k not in _PRODUCT_KEYS},
        )
    children = data.get("children") or {}
    return FolderNode(
        thumbnail=data.get("thumbnail") or "",
        children=tree_from_dict(children, path),
        count=int(data.get("count") or 0),
        top_order=data.get("topOrder"),
        drive_link=data.get("driveLink"),
        section=data.get("section"),
        category=data.get("category"),
        extra={k: v for k, v in data.items() if k not in _FOLDER_KEYS},
    )


def tree_from_dict(data: Any, prefix: str = "") -> Tree:
    if not isinstance(data, dict):
        raise ArtifactError(f"Catalog children at {prefix or '<root>'} are not an object")
    return {
        key: node_from_dict(value, f"{prefix}/{key}" if prefix else key)
        for key, value in data.items()
    }


def iter_nodes(tree: Tree, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Node]]:
    """Pre-order walk yielding ``(path segments, node)``."""
    for key, node in tree.items():
        here = prefix + (key,)
        yield here, node
        if isinstance(node, FolderNode):
            yield from iter_nodes(node.children, here)


def iter_products(tree: Tree) -> Iterator[tuple[str, ProductNode]]:
    for segs, node in iter_nodes(tree):
        if isinstance(node, ProductNode):
            yield "/".join(segs), node
