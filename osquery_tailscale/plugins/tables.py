"""osquery table plugins built from :class:`TableDefinition` objects.

osquery's extension manager instantiates plugin classes itself (no
constructor arguments), so each definition is closed over by a freshly built
``TablePlugin`` subclass rather than passed in at runtime.

Nothing in here knows about Tailscale; the same adapter would serve any list
of definitions.
"""
from __future__ import annotations

from typing import Iterable, List, Type

import osquery
from loguru import logger

from osquery_tailscale.models.table import ColumnType, TableDefinition

_COLUMN_TYPES = {
    ColumnType.TEXT: osquery.STRING,
    ColumnType.INTEGER: osquery.INTEGER,
}


def make_plugin(table: TableDefinition) -> Type[osquery.TablePlugin]:
    """Return a ``TablePlugin`` subclass serving *table*."""

    class _TablePlugin(osquery.TablePlugin):
        definition = table

        def name(self):
            return table.name

        def columns(self):
            return [osquery.TableColumn(name=c.name, type=_COLUMN_TYPES[c.type]) for c in table.columns]

        def generate(self, context):
            # Predicate hints in *context* are ignored; always a full scan.
            try:
                rows = table.generate(context)
            except Exception:
                logger.exception("Scan of {} failed", table.name)
                raise
            logger.debug("Scan of {} returned {} rows", table.name, len(rows))
            return rows

    _TablePlugin.__name__ = _TablePlugin.__qualname__ = f"{table.name.title().replace('_', '')}Plugin"
    return _TablePlugin


def register_tables(tables: Iterable[TableDefinition]) -> List[Type[osquery.TablePlugin]]:
    """Register one plugin per definition with osquery's extension manager."""
    plugins = []
    for table in tables:
        plugin = make_plugin(table)
        osquery.register_plugin(plugin)
        logger.debug("Registered table plugin {}", table.name)
        plugins.append(plugin)
    return plugins
