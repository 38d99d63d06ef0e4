"""Query templates for the permissions table.

Templates take the table name through ``str.format``; values are always
passed as positional ``$n`` parameters.
"""

from typing import Dict

# Schema management
CREATE_PERMISSIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS {table} (
        perm_id INTEGER NOT NULL PRIMARY KEY,
        perm_name VARCHAR(255) NOT NULL UNIQUE,
        perm_parents VARCHAR(255) NOT NULL DEFAULT '',
        perm_data TEXT
    )
"""
CREATE_SEQUENCE = "CREATE SEQUENCE IF NOT EXISTS {sequence}"
NEXT_ID = "SELECT nextval('{sequence}')"

# Lookups
SELECT_BY_NAME = "SELECT perm_id, perm_data FROM {table} WHERE perm_name = $1"
SELECT_BY_ID = "SELECT perm_name, perm_data FROM {table} WHERE perm_id = $1"
SELECT_ID_BY_NAME = "SELECT perm_id FROM {table} WHERE perm_name = $1"
SELECT_PARENT_ROW = "SELECT perm_id, perm_parents FROM {table} WHERE perm_name = $1"
SELECT_PARENTS = "SELECT perm_parents FROM {table} WHERE perm_name = $1"
COUNT_BY_NAME = "SELECT COUNT(*) FROM {table} WHERE perm_name = $1"
SELECT_TREE = "SELECT perm_id, perm_name FROM {table} ORDER BY perm_name ASC"
SELECT_CHILDREN = "SELECT perm_id, perm_name FROM {table} WHERE perm_name LIKE $1 ORDER BY perm_name ASC"

# Mutations
INSERT_PERMISSION = "INSERT INTO {table} (perm_id, perm_name, perm_parents) VALUES ($1, $2, $3)"
UPDATE_DATA = "UPDATE {table} SET perm_data = $1 WHERE perm_id = $2"
DELETE_BY_NAME = "DELETE FROM {table} WHERE perm_name = $1"
DELETE_CHILDREN = "DELETE FROM {table} WHERE perm_name LIKE $1"


def sequence_name(table: str) -> str:
    """Name of the id sequence backing ``table``."""
    return f"{table}_seq"


def render_queries(table: str) -> Dict[str, str]:
    """Render every table-scoped template for ``table``."""
    templates = {
        "create_table": CREATE_PERMISSIONS_TABLE,
        "select_by_name": SELECT_BY_NAME,
        "select_by_id": SELECT_BY_ID,
        "select_id_by_name": SELECT_ID_BY_NAME,
        "select_parent_row": SELECT_PARENT_ROW,
        "select_parents": SELECT_PARENTS,
        "count_by_name": COUNT_BY_NAME,
        "select_tree": SELECT_TREE,
        "select_children": SELECT_CHILDREN,
        "insert_permission": INSERT_PERMISSION,
        "update_data": UPDATE_DATA,
        "delete_by_name": DELETE_BY_NAME,
        "delete_children": DELETE_CHILDREN,
    }
    return {key: template.format(table=table) for key, template in templates.items()}
