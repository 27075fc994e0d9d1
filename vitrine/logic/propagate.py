"""Thumbnail inheritance across the catalog tree.

Children are consulted before ancestors: a node keeps its own thumbnail, else
takes its nearest descendant's, else its nearest ancestor's, else the
placeholder. ``propagate_thumbs_from_children`` must run first.
"""

from __future__ import annotations

from vitrine.logic.nodes import FolderNode, Tree


def propagate_thumbs_from_children(tree: Tree) -> None:
    for node in tree.values():
        if not isinstance(node, FolderNode):
            continue
        propagate_thumbs_from_children(node.children)
        if node.thumbnail:
            continue
        for child in node.children.values():
            if child.thumbnail:
                node.thumbnail = child.thumbnail
                break


def fill_thumbs_from_ancestors(tree: Tree, placeholder: str, inherited: str = "") -> None:
    for node in tree.values():
        current = node.thumbnail or inherited or placeholder
        if not node.thumbnail:
            node.thumbnail = current
        if isinstance(node, FolderNode):
            fill_thumbs_from_ancestors(node.children, placeholder, current)


def propagate_thumbnails(tree: Tree, placeholder: str) -> None:
    propagate_thumbs_from_children(tree)
    fill_thumbs_from_ancestors(tree, placeholder)
