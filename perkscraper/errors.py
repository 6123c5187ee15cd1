"""Exception types raised by the perk scraper.

Only :class:`DatasetIOError` and :class:`SchemaError` are fatal; they abort a
run before any output is written.  :class:`SelectorTimeoutError` is raised per
record and absorbed by the enrichment loop.
"""

from __future__ import annotations


class PerkScraperError(Exception):
    """Base class for all perk scraper errors."""


class DatasetIOError(PerkScraperError, OSError):
    """A dataset file could not be read, parsed, or written."""


class SchemaError(PerkScraperError, ValueError):
    """The dataset document lacks a usable ``perks`` sequence."""


class SelectorTimeoutError(PerkScraperError, TimeoutError):
    """An expected DOM element did not appear within the bounded wait."""
