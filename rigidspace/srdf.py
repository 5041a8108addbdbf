"""Removal of collision pairs listed in a semantic robot description."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ElementTree

from rigidspace.model import Model

__all__ = ["remove_collision_pairs_from_xml", "remove_collision_pairs"]

_log = logging.getLogger(__name__)


def _link_name(element: ElementTree.Element, attribute: str, prefix: str) -> str:
    value = element.get(attribute)
    if value is None:
        raise ValueError(f"disable_collisions element without attribute {attribute!r}")
    return prefix + value


def _disabled_frames(model: Model, prefix: str, root: ElementTree.Element):
    """Yield the frame pairs whose collisions the document disables."""
    for element in root:
        if element.tag != "disable_collisions":
            continue
        link1 = _link_name(element, "link1", prefix)
        link2 = _link_name(element, "link2", prefix)
        if not model.exist_body_name(link1):
            _log.error("%s, %s. Link1 does not exist in model. Skip", link1, link2)
            continue
        if not model.exist_body_name(link2):
            _log.error("%s, %s. Link2 does not exist in model. Skip", link1, link2)
            continue
        frame1 = model.get_body_id(link1)
        frame2 = model.get_body_id(link2)
        if frame1 == frame2:
            _log.info("Cannot disable collision between %s and %s", link1, link2)
            continue
        yield link1, link2, frame1, frame2


def remove_collision_pairs_from_xml(model: Model, prefix: str, xml_string: str) -> int:
    """Remove from ``model`` the collision pairs disabled by an SRDF string.

    Link names of the document are prefixed with ``prefix``. Links that
    are not bodies of the model are skipped. Return the number of pairs
    removed.
    """
    try:
        root = ElementTree.fromstring(xml_string)
    except ElementTree.ParseError as error:
        raise ValueError(f"invalid SRDF document: {error}") from error
    if root.tag != "robot":
        raise ValueError(f"SRDF root element must be 'robot', got {root.tag!r}")

    objects = model.geometry_objects
    pairs = list(model.collision_pairs)
    initial = len(pairs)
    for link1, link2, frame1, frame2 in _disabled_frames(model, prefix, root):
        kept = [
            (first, second)
            for first, second in pairs
            if {objects[first].parent_frame, objects[second].parent_frame}
            != {frame1, frame2}
        ]
        if len(kept) != len(pairs):
            _log.info("Remove collision pair (%s,%s)", link1, link2)
        pairs = kept

    removed = initial - len(pairs)
    if removed:
        _log.info("Removing %d collision pairs.", removed)
        model.collision_pairs = pairs
    return removed


def remove_collision_pairs(model: Model, prefix: str, filename) -> int:
    """Remove from ``model`` the collision pairs disabled by an SRDF file.

    The file name must end with the ``srdf`` extension. Return the number
    of pairs removed.
    """
    filename = str(filename)
    extension = filename[filename.rfind(".") + 1 :]
    if extension != "srdf":
        raise ValueError(f"{filename} does not have the right extension.")
    try:
        with open(filename, encoding="utf-8") as stream:
            content = stream.read()
    except OSError as error:
        raise ValueError(f"{filename} does not seem to be a valid file.") from error
    return remove_collision_pairs_from_xml(model, prefix, content)