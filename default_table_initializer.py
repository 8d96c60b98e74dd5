from typing import List

from column_registry import Column


class DefaultTableInitializer:
    def create_columns(self) -> List[Column]:
        return [
            Column("name", "Name", visible=True, type="text"),
            Column("email", "Email", visible=True, type="email"),
            Column("age", "Age", visible=True, type="number"),
            Column("role", "Role", visible=True, type="text"),
            Column("department", "Department", visible=False, type="text"),
            Column("location", "Location", visible=False, type="text"),
        ]

    def create_rows(self) -> List[dict]:
        people = [
            ("John Doe", 28, "Developer", "Engineering", "New York"),
            ("Jane Smith", 32, "Designer", "Design", "San Francisco"),
            ("Mike Johnson", 35, "Manager", "Management", "Chicago"),
            ("Sarah Wilson", 29, "Developer", "Engineering", "Austin"),
            ("David Brown", 41, "Director", "Management", "Boston"),
        ]
        rows = []
        for idx, (name, age, role, department, location) in enumerate(people, start=1):
            rows.append(
                {
                    "id": str(idx),
                    "name": name,
                    "email": name.lower().replace(" ", ".") + "@example.com",
                    "age": age,
                    "role": role,
                    "department": department,
                    "location": location,
                }
            )
        return rows
