"""Document merger - folds plugin identity, options and policies into config documents."""

import logging
from typing import Any, Iterable, List, Mapping

from gateway.documents import StructuredDocument

logger = logging.getLogger(__name__)

PLUGINS_KEY = "plugins"
POLICIES_KEY = "policies"
PACKAGE_KEY = "package"


def migrate_plugin_list(document: StructuredDocument) -> bool:
    """Convert a legacy ``plugins: [name, ...]`` list into the keyed mapping.

    Returns:
        True if the document was changed
    """
    plugins = document.get((PLUGINS_KEY,))
    if not isinstance(plugins, list):
        return False

    migrated = {}
    for name in plugins:
        if isinstance(name, str) and name not in migrated:
            migrated[name] = None
        elif not isinstance(name, str):
            logger.warning(f"Dropping non-string plugin entry {name!r} from {document.path}")

    document.set((PLUGINS_KEY,), migrated)
    logger.warning(f"Migrated list-style plugins in {document.path} to a mapping ({len(migrated)} plugin(s))")
    return True


def merge_plugin(
    document: StructuredDocument,
    name: str,
    package: str,
    options: Mapping[str, Any],
) -> None:
    """Add or update a plugin entry in the system config.

    The entry is keyed by ``name``. A ``package`` field records the install
    identifier only when it differs from the name. Options are set on the
    entry key by key; unrelated keys of an existing entry are kept.
    """
    migrate_plugin_list(document)

    plugins = document.get((PLUGINS_KEY,))
    if not isinstance(plugins, dict):
        document.set((PLUGINS_KEY,), {})
        plugins = document.get((PLUGINS_KEY,))

    if name not in plugins:
        document.set((PLUGINS_KEY, name), None)

    if name != package:
        document.set((PLUGINS_KEY, name, PACKAGE_KEY), package)

    for key, value in options.items():
        document.set((PLUGINS_KEY, name, key), value)

    logger.info(f"Merged plugin '{name}' ({len(options)} option(s)) into {document.path}")


def merge_policies(document: StructuredDocument, policies: Iterable[str]) -> List[str]:
    """Append policies to the gateway config whitelist.

    Existing entries keep their order; new ones are appended in declaration
    order and duplicates are skipped.

    Returns:
        The resulting policy list
    """
    existing = document.get((POLICIES_KEY,))
    merged = list(existing) if isinstance(existing, list) else []

    added = []
    for policy in policies:
        if policy not in merged:
            merged.append(policy)
            added.append(policy)

    if added or not isinstance(existing, list):
        document.set((POLICIES_KEY,), merged)

    logger.info(f"Added {len(added)} policy(ies) to {document.path}: {added}")
    return merged
