"""
Student Registry - Sample Data

Seeds an empty student table with ten sample students.
"""

import logging
from datetime import date

from sqlalchemy import func, select

from .database import StudentDatabase
from .models import Student

logger = logging.getLogger(__name__)

SAMPLE_STUDENTS: list[dict] = [
    {"full_name": "John Doe", "birth_date": date(2000, 1, 15), "average_grade": 85.5, "is_active": True},
    {"full_name": "Jane Smith", "birth_date": date(1999, 5, 20), "average_grade": 92.3, "is_active": True},
    {"full_name": "Bob Johnson", "birth_date": date(2001, 8, 10), "average_grade": 78.9, "is_active": False},
    {"full_name": "Alice Williams", "birth_date": date(2000, 12, 5), "average_grade": 95.7, "is_active": True},
    {"full_name": "Charlie Brown", "birth_date": date(1998, 3, 25), "average_grade": 81.2, "is_active": True},
    {"full_name": "Emma Davis", "birth_date": date(2001, 7, 8), "average_grade": 89.4, "is_active": True},
    {"full_name": "Michael Wilson", "birth_date": date(1999, 11, 12), "average_grade": 76.8, "is_active": True},
    {"full_name": "Sophia Taylor", "birth_date": date(2000, 4, 18), "average_grade": 93.1, "is_active": False},
    {"full_name": "James Anderson", "birth_date": date(1998, 9, 30), "average_grade": 87.6, "is_active": True},
    {"full_name": "Isabella Martinez", "birth_date": date(2001, 2, 14), "average_grade": 91.5, "is_active": True},
]


async def seed_students(database: StudentDatabase) -> int:
    """
    Insert the sample students if the table is empty.

    Returns:
        Number of students inserted (0 when data already exists)
    """
    await database.initialize()

    async with database.get_session() as session:
        existing = await session.scalar(select(func.count()).select_from(Student))
        if existing:
            logger.info("Database already contains student data, skipping seeding")
            return 0

        logger.info("Seeding database with sample student data")
        session.add_all(Student(**row) for row in SAMPLE_STUDENTS)
        await session.commit()

    logger.info(f"Successfully seeded {len(SAMPLE_STUDENTS)} students into the database")
    return len(SAMPLE_STUDENTS)
