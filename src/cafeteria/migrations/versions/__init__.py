"""
Schema migrations for the cafeteria store.

Each module defines one MigrationBase subclass. Modules are discovered by
MigrationRegistry in file-name order; keep the vNNN_ prefix.
"""
