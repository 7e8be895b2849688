"""Structured config documents - plain JSON and format-preserving YAML.

Both formats expose the same small interface: ``get(path)``, ``set(path,
value)``, ``serialize()`` and ``save()``, where ``path`` is a sequence of
mapping keys. JSON documents are re-serialized in full. YAML documents are
edited through ruamel.yaml's round-trip tree so comments, key order, quoting
and indentation of untouched regions come back out unchanged.
"""

import io
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from gateway.errors import ConfigDocumentError

logger = logging.getLogger(__name__)

KeyPath = Sequence[str]

JSON_INDENT = 2


class StructuredDocument(ABC):
    """A config file loaded into memory for editing."""

    # Whether untouched regions of the source text survive serialize()
    preserves_formatting = False

    def __init__(self, path: Path, text: str):
        self.path = path
        self.root = self._parse(text)

    @abstractmethod
    def _parse(self, text: str) -> dict:
        """Parse source text into a root mapping."""

    @abstractmethod
    def serialize(self) -> str:
        """Render the current document as text."""

    def _new_mapping(self) -> dict:
        return {}

    def _assign(self, mapping: dict, key: str, value: Any) -> None:
        mapping[key] = value

    def get(self, path: KeyPath, default: Any = None) -> Any:
        """Return the value at ``path``, or ``default`` if any key is absent."""
        node: Any = self.root
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set(self, path: KeyPath, value: Any) -> None:
        """Set the value at ``path``, creating intermediate mappings."""
        if not path:
            raise ValueError("path must name at least one key")

        node = self.root
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = self._new_mapping()
                self._assign(node, key, child)
            node = child
        self._assign(node, path[-1], value)

    def save(self) -> None:
        """Write the serialized document back to its file."""
        text = self.serialize()
        if self.preserves_formatting:
            text = text.rstrip()

        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Wrote {self.path}")


class JsonDocument(StructuredDocument):
    """JSON config document; rewritten in full with a 2-space indent."""

    def _parse(self, text: str) -> dict:
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigDocumentError(self.path, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigDocumentError(self.path, "top level must be an object")
        return data

    def serialize(self) -> str:
        return json.dumps(self.root, indent=JSON_INDENT, ensure_ascii=False)


def guess_indentation(text: str) -> Tuple[int, int, int]:
    """Guess (mapping, sequence, offset) indentation from YAML text.

    ``mapping`` is the indent of nested mapping keys, ``offset`` the indent of
    a block sequence dash below its parent key and ``sequence`` the indent of
    the item content. Missing samples fall back to a 2-space mapping indent
    with dashes indented under their key.
    """
    mapping: Optional[int] = None
    sequence: Optional[int] = None
    offset: Optional[int] = None
    parent_indent: Optional[int] = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        indent = len(line) - len(line.lstrip(" "))
        if parent_indent is not None:
            is_item = stripped.startswith("- ") or stripped == "-"
            if is_item and offset is None and indent >= parent_indent:
                offset = indent - parent_indent
                content = len(stripped) - len(stripped[1:].lstrip(" "))
                sequence = offset + max(content, 2)
            elif not is_item and mapping is None and indent > parent_indent:
                mapping = indent - parent_indent

        if mapping is not None and offset is not None:
            break

        if stripped.endswith(":") and not stripped.startswith("- "):
            parent_indent = indent
        else:
            parent_indent = None

    mapping = mapping or 2
    if offset is None:
        offset, sequence = mapping, mapping + 2
    return mapping, max(sequence, offset + 2), offset


def has_document_start(text: str) -> bool:
    """Check whether the first significant line is a '---' marker."""
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        return stripped == "---" or stripped.startswith("--- ")
    return False


def _to_round_trip(value: Any) -> Any:
    if isinstance(value, dict) and not isinstance(value, CommentedMap):
        converted = CommentedMap()
        for key, item in value.items():
            converted[key] = _to_round_trip(item)
        return converted
    if isinstance(value, list) and not isinstance(value, CommentedSeq):
        return CommentedSeq(_to_round_trip(item) for item in value)
    return value


def _open_flow_collection(collection: Any) -> None:
    """Switch an empty ``{}`` / ``[]`` to block style before it gains items."""
    if isinstance(collection, (CommentedMap, CommentedSeq)) and not collection:
        if collection.fa.flow_style():
            collection.fa.set_block_style()


class YamlDocument(StructuredDocument):
    """YAML config document edited in place through ruamel.yaml round-tripping."""

    preserves_formatting = True

    def __init__(self, path: Path, text: str):
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.width = 4096
        mapping, sequence, offset = guess_indentation(text)
        self._yaml.indent(mapping=mapping, sequence=sequence, offset=offset)
        # Source text of a document holding no data, only comments
        self._preamble = ""
        super().__init__(path, text)
        self._initial_keys = set(self.root.keys())
        if not self._preamble and has_document_start(text):
            self._yaml.explicit_start = True

    def _parse(self, text: str) -> CommentedMap:
        try:
            data = self._yaml.load(text)
        except YAMLError as e:
            raise ConfigDocumentError(self.path, f"invalid YAML: {e}") from e
        if data is None:
            self._preamble = text if text.strip() else ""
            return CommentedMap()
        if not isinstance(data, CommentedMap):
            raise ConfigDocumentError(self.path, "top level must be a mapping")
        return data

    def _new_mapping(self) -> CommentedMap:
        return CommentedMap()

    def _assign(self, mapping: dict, key: str, value: Any) -> None:
        existing = mapping.get(key)
        if isinstance(existing, CommentedSeq) and isinstance(value, list):
            self._update_sequence(existing, value)
            return
        if isinstance(existing, CommentedMap) and isinstance(value, dict) and existing is not value:
            self._update_mapping(existing, value)
            return

        if key not in mapping:
            _open_flow_collection(mapping)
        mapping[key] = _to_round_trip(value)

    def _update_sequence(self, existing: CommentedSeq, items: list) -> None:
        if list(existing) == items[:len(existing)]:
            additions = items[len(existing):]
        else:
            while existing:
                existing.pop()
            additions = items
        if additions:
            _open_flow_collection(existing)
        existing.extend(_to_round_trip(item) for item in additions)

    def _update_mapping(self, existing: CommentedMap, items: dict) -> None:
        for key in [k for k in existing if k not in items]:
            del existing[key]
        for key, item in items.items():
            self._assign(existing, key, item)

    def _new_top_level_keys(self) -> Iterable[str]:
        return [k for k in self.root if k not in self._initial_keys and isinstance(k, str)]

    def serialize(self) -> str:
        stream = io.StringIO()
        self._yaml.dump(self.root, stream)
        text = stream.getvalue()

        # A block appended under a new top-level key gets a blank line before it
        for key in self._new_top_level_keys():
            pattern = r"^(?:{0}|'{0}'|\"{0}\")\s*:".format(re.escape(key))
            match = re.search(pattern, text, re.MULTILINE)
            if not match or match.start() == 0:
                continue
            offset = match.start()
            if not text[:offset].endswith("\n\n"):
                text = text[:offset] + "\n" + text[offset:]

        if self._preamble:
            if not self.root:
                return self._preamble
            text = self._preamble.rstrip() + "\n\n" + text
        return text


def load_document(path: Path) -> StructuredDocument:
    """Load a config document, choosing the format from the file suffix.

    ``.json`` files are JSON; anything else is treated as YAML.

    Raises:
        ConfigDocumentError: if the file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigDocumentError(path, str(e)) from e

    if path.suffix.lower() == ".json":
        return JsonDocument(path, text)
    return YamlDocument(path, text)
