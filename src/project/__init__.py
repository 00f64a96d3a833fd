"""Project construction core.

- models.py: coordinates, dependency edges, import actions, relative paths
- scope.py: effective scope and traversal candidacy
- resolver.py: breadth-first artifact graph walk
- importer.py: recording imported bundles in POMs
- tree.py: module lookup, module trees and moves
- remove.py: bundle removal
- scaffold.py: attaching new modules to the tree
"""
