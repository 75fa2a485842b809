"""Directory entries used when the stored user list cannot be read."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from .schemas import User


def seed_users() -> List[User]:
    return [
        User.model_validate(
            {
                "id": "1",
                "firstName": "John",
                "lastName": "Doe",
                "email": "john.doe@certifyone.com",
                "role": "employee",
                "department": "Engineering",
                "position": "Software Engineer",
                "phone": "+1-555-0123",
                "emergencyContact": {"name": "Jane Doe", "relationship": "Spouse", "phone": "+1-555-0124"},
                "address": {
                    "street": "123 Main St",
                    "city": "New York",
                    "state": "NY",
                    "zipCode": "10001",
                    "country": "USA",
                },
                "employmentDetails": {
                    "employeeId": "EMP001",
                    "startDate": "2023-01-15",
                    "manager": "Sarah Wilson",
                    "salary": 75000,
                    "employmentType": "full-time",
                },
                "status": "active",
                "createdAt": datetime(2023, 1, 15, 9, tzinfo=timezone.utc),
                "updatedAt": datetime(2023, 1, 15, 9, tzinfo=timezone.utc),
            }
        ),
        User.model_validate(
            {
                "id": "2",
                "firstName": "Sarah",
                "lastName": "Wilson",
                "email": "sarah.wilson@certifyone.com",
                "role": "admin",
                "department": "HR",
                "position": "HR Manager",
                "phone": "+1-555-0125",
                "emergencyContact": {"name": "Mike Wilson", "relationship": "Husband", "phone": "+1-555-0126"},
                "address": {
                    "street": "456 Oak Ave",
                    "city": "New York",
                    "state": "NY",
                    "zipCode": "10002",
                    "country": "USA",
                },
                "employmentDetails": {
                    "employeeId": "EMP002",
                    "startDate": "2022-06-01",
                    "manager": "CEO",
                    "salary": 85000,
                    "employmentType": "full-time",
                },
                "status": "active",
                "createdAt": datetime(2022, 6, 1, 9, tzinfo=timezone.utc),
                "updatedAt": datetime(2022, 6, 1, 9, tzinfo=timezone.utc),
            }
        ),
    ]
