#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, replaces string splicing of package metadata
# - Parses OPF, NCX and navigation documents with ElementTree
# - Keeps the original prolog (XML declaration and DOCTYPE) and prefixes
# - Serializes under a lock because the namespace registry is global
#

"""
epub_xml.py - Parsed-tree access to package metadata documents
==============================================================

Every structural edit works on an ElementTree tree of the document it
changes. This module owns parsing, serialization and the small set of tree
helpers the editors share (local-name lookup, whitespace-preserving
insertion and removal).
"""

from __future__ import annotations

import copy
import logging
import threading
import xml.etree.ElementTree as ET
from typing import Iterator

from .epub_constants import ROOT_START_RE
from .epub_errors import StructuralMismatchError

logger = logging.getLogger(__name__)

# ET.register_namespace mutates a module-level map
_SERIALIZE_LOCK = threading.Lock()


def local_name(tag: object) -> str:
    """Return the tag without its ``{namespace}`` part ("" for comments)."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def namespace_of(tag: str) -> str | None:
    """Return the namespace URI of a qualified tag, if any."""
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def qualified(like: ET.Element | str | None, name: str) -> str:
    """
    Build a tag in the same namespace as ``like``.

    Args:
        like: Element whose namespace to use, a namespace URI, or None
        name: Local name of the new tag

    Returns:
        ``{uri}name`` or plain ``name``
    """
    uri = namespace_of(like.tag) if isinstance(like, ET.Element) else like
    return f"{{{uri}}}{name}" if uri else name


def find_child(parent: ET.Element, name: str) -> ET.Element | None:
    """First direct child with the given local name."""
    for child in parent:
        if local_name(child.tag) == name:
            return child
    return None


def find_children(parent: ET.Element, name: str) -> list[ET.Element]:
    """All direct children with the given local name."""
    return [child for child in parent if local_name(child.tag) == name]


def iter_named(root: ET.Element, name: str) -> Iterator[ET.Element]:
    """All descendants (and root) with the given local name, document order."""
    for elem in root.iter():
        if local_name(elem.tag) == name:
            yield elem


def insert_before(parent: ET.Element, ref: ET.Element, child: ET.Element) -> None:
    """
    Insert ``child`` right before ``ref``, reusing ref's indentation.

    Args:
        parent: Parent of ``ref``
        ref: Existing child to insert before
        child: New element
    """
    children = list(parent)
    index = children.index(ref)
    child.tail = parent.text if index == 0 else children[index - 1].tail
    parent.insert(index, child)


def append_child(parent: ET.Element, child: ET.Element) -> None:
    """Append ``child`` as last child, keeping sibling indentation."""
    children = list(parent)
    if children:
        last = children[-1]
        indent = children[-2].tail if len(children) > 1 else parent.text
        child.tail = last.tail
        last.tail = indent
    parent.append(child)


def remove_child(parent: ET.Element, child: ET.Element) -> None:
    """Remove ``child`` without leaving its indentation behind."""
    children = list(parent)
    index = children.index(child)
    if index == len(children) - 1:
        if index > 0:
            children[index - 1].tail = child.tail
        else:
            parent.text = child.tail
    parent.remove(child)


def replace_children(parent: ET.Element, old: list[ET.Element], new: list[ET.Element]) -> None:
    """
    Put ``new`` where the first of ``old`` was and drop the rest of ``old``.

    Used to rebuild a reordered run of siblings in place. Other children keep
    their relative positions.

    Args:
        parent: Common parent
        old: Children to take out, in document order
        new: Children to put in, in the wanted order
    """
    if not old:
        return
    children = list(parent)
    old_ids = {id(elem) for elem in old}
    ordered: list[ET.Element] = []
    inserted = False
    for elem in children:
        if id(elem) not in old_ids:
            ordered.append(elem)
        elif not inserted:
            ordered.extend(new)
            inserted = True

    # Reuse the original run of tails so the indentation stays the same
    tails = [elem.tail for elem in children]
    inner = tails[:-1] or tails
    for position, elem in enumerate(ordered):
        if position == len(ordered) - 1:
            elem.tail = tails[-1]
        else:
            elem.tail = inner[min(position, len(inner) - 1)]
    parent[:] = ordered


class XmlDocument:
    """A parsed metadata document together with what ElementTree drops."""

    def __init__(self, root: ET.Element, prolog: str = "", namespaces: list[tuple[str, str]] | None = None, trailing_newline: bool = False):
        self.root = root
        self.prolog = prolog
        self.namespaces = namespaces or []
        self.trailing_newline = trailing_newline

    @classmethod
    def parse(cls, text: str, name: str = "document") -> XmlDocument:
        """
        Parse document text, keeping its prolog and namespace prefixes.

        Args:
            text: Full document text
            name: Entry name used in error messages

        Returns:
            Parsed document

        Raises:
            StructuralMismatchError: If the text is not well-formed XML
        """
        m = ROOT_START_RE.search(text)
        if m is None:
            raise StructuralMismatchError(f"{name} has no root element")

        parser = ET.XMLPullParser(events=("start", "start-ns"))
        root: ET.Element | None = None
        namespaces: list[tuple[str, str]] = []
        try:
            parser.feed(text[m.start() :])
            parser.close()
            # Parse errors are queued with the events
            for event, payload in parser.read_events():
                if event == "start-ns":
                    if payload not in namespaces:
                        namespaces.append(payload)
                elif root is None:
                    root = payload
        except ET.ParseError as e:
            raise StructuralMismatchError(f"Cannot parse {name}: {e}") from e
        if root is None:
            raise StructuralMismatchError(f"{name} has no root element")

        return cls(root, text[: m.start()], namespaces, text.endswith("\n"))

    @property
    def default_namespace(self) -> str | None:
        for prefix, uri in self.namespaces:
            if prefix == "":
                return uri
        return None

    def to_text(self) -> str:
        """
        Serialize the document with its original prolog and prefixes.

        Returns:
            Document text
        """
        default_uri = self.default_namespace
        root = self.root
        with _SERIALIZE_LOCK:
            for prefix, uri in self.namespaces:
                if prefix and uri != default_uri:
                    try:
                        ET.register_namespace(prefix, uri)
                    except ValueError:
                        logger.debug(f"Cannot register reserved prefix '{prefix}'")
            if default_uri:
                ET.register_namespace("", default_uri)
                alias = next((p for p, u in self.namespaces if p and u == default_uri), None)
                if alias:
                    root = _alias_default_attributes(root, default_uri, alias)
            body = ET.tostring(root, encoding="unicode")
        return self.prolog + body + ("\n" if self.trailing_newline else "")


def _alias_default_attributes(root: ET.Element, uri: str, alias: str) -> ET.Element:
    """
    Write attributes in the default namespace with an explicit prefix.

    Attributes are never in the default namespace, so ``opf:role`` style
    attributes need their own prefix to survive serialization.
    """
    marker = f"{{{uri}}}"
    if not any(key.startswith(marker) for elem in root.iter() for key in elem.keys()):
        return root
    root = copy.deepcopy(root)
    for elem in root.iter():
        for key in [k for k in elem.keys() if k.startswith(marker)]:
            elem.set(f"{alias}:{key[len(marker):]}", elem.attrib.pop(key))
    root.set(f"xmlns:{alias}", uri)
    return root
