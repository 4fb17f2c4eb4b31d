"""Debug utilities for the compile pipeline."""

from .tree_export import export_tree_dot, export_tree_json

__all__ = ['export_tree_dot', 'export_tree_json']
