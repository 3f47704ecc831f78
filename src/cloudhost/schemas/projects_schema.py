# cloudhost/schemas/projects_schema.py
"""
Project Schema
---------------
Display headers for the project list:
  ID | Title | URL | Host
"""

from typing import Dict, List


class ProjectSchema:
    def __init__(self):
        # Raw row keys -> column headers, in display order
        self.display_headers: Dict[str, str] = {
            "id": "ID",
            "title": "Title",
            "url": "URL",
            "host": "Host",
        }

        # Properties suggested for --sort (any project property is accepted)
        self.sortable_fields: List[str] = ["title", "id", "host", "created_at", "region", "status"]

    def all_sortable_fields(self) -> List[str]:
        return list(self.sortable_fields)


schema = ProjectSchema()
