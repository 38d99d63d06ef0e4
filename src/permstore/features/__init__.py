"""Features module for permstore.

Each feature keeps its own entities, repositories, adapters, services and
utils. Import features directly (``permstore.features.permissions``);
this package does not re-export them.
"""
