"""
Core Package.

Contains the hoisting pass:
- Handle name and shadow resolution (``names``)
- Registration call recognition (``calls``)
- Factory validation (``validation``)
- Grouping and closure of supporting declarations (``hoisting``)
- Dependency import extraction (``imports``)
- Module path rewriting (``paths``, ``resolver``)
- Block-scoped transformer and entry points (``transformer``, ``engine``)
"""
