"""
Platform Path Resolution.

The path rewriter turns non-relative module specifiers into platform paths
through an optional resolver. Resolution is fail-open: a missing resolver, an
unknown specifier, or a resolver that raises all mean "leave the literal alone".
"""

import logging
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from hoist_mocks.config import HoistConfig

logger = logging.getLogger(__name__)


class PathResolver(Protocol):
  """
  Maps a module specifier to platform path segments.
  """

  def resolve(self, specifier: str, containing_file: Optional[str]) -> Optional[Sequence[str]]:
    """
    Resolves a specifier.

    Args:
        specifier: The module specifier (e.g. ``"@pkg/lib"``).
        containing_file: The file containing the registration, if known.

    Returns:
        Optional[Sequence[str]]: Segments such as
        ``["ReplicatedStorage", "Packages", "lib"]``, or None when unknown.
    """
    ...


class StaticPathResolver:
  """
  Resolves specifiers from a static prefix table.

  The longest matching prefix wins; any remaining ``/``-separated part of the
  specifier is appended as extra segments.

  Example:
      >>> StaticPathResolver({"@pkg/lib": ["ReplicatedStorage", "lib"]}).resolve("@pkg/lib/util", None)
      ['ReplicatedStorage', 'lib', 'util']
  """

  def __init__(self, table: Mapping[str, Sequence[str]]):
    """
    Initializes the resolver.

    Args:
        table: Specifier prefix -> platform segments.
    """
    self._table: Dict[str, List[str]] = {prefix.rstrip("/"): list(segments) for prefix, segments in table.items()}

  @classmethod
  def from_config(cls, config: HoistConfig) -> Optional["StaticPathResolver"]:
    """Builds a resolver from ``config.package_paths``, or None if the table is empty."""
    if not config.package_paths:
      return None
    return cls(config.package_paths)

  def resolve(self, specifier: str, containing_file: Optional[str]) -> Optional[Sequence[str]]:
    for prefix in sorted(self._table, key=len, reverse=True):
      if specifier == prefix:
        return list(self._table[prefix])
      if specifier.startswith(prefix + "/"):
        extra = [segment for segment in specifier[len(prefix) + 1 :].split("/") if segment]
        return self._table[prefix] + extra
    return None


def strip_index_segment(segments: Sequence[str], config: HoistConfig) -> List[str]:
  """
  Drops a trailing index-like segment (``index``, ``__init__`` or a file name).

  Args:
      segments: Platform path segments.
      config: Active configuration.

  Returns:
      List[str]: Segments addressing the containing unit.
  """
  result = list(segments)
  if result and (result[-1] in config.index_segments or "." in result[-1]):
    result = result[:-1]
  return result


def safe_resolve(
  resolver: Optional[PathResolver],
  specifier: str,
  containing_file: Optional[str],
  config: HoistConfig,
) -> Optional[List[str]]:
  """
  Invokes a resolver without ever raising.

  Args:
      resolver: The resolver, or None.
      specifier: Module specifier to resolve.
      containing_file: File containing the registration.
      config: Active configuration.

  Returns:
      Optional[List[str]]: Non-empty platform segments, or None on any miss.
  """
  if resolver is None:
    return None
  try:
    segments = resolver.resolve(specifier, containing_file)
  except Exception as e:
    logger.debug("Path resolver failed for %r: %s", specifier, e)
    return None
  if segments is None:
    return None
  return strip_index_segment(segments, config) or None
