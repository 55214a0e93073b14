"""
repositories/task_repo.py
-------------------------
Data access layer for tasks.
"""

from typing import Optional

from db import Database
from models.task import Task
from utils.helpers import new_id
from utils.logger import get_logger

logger = get_logger(__name__)


class TaskRepository:
    """Repository for the tasks table."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        title: str,
        category: str,
        difficulty: str,
        description: str,
        flag: str,
        points: int,
        resources: str = "",
        task_id: Optional[str] = None,
    ) -> Task:
        """Insert a task; ``task_id`` lets seed data keep stable ids."""
        task = Task(
            id=task_id or new_id(),
            title=title,
            category=category,
            difficulty=difficulty,
            description=description,
            flag=flag,
            points=points,
            resources=resources,
        )
        sql = """
            INSERT INTO tasks (id, title, category, difficulty, description, flag, points, resources)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s);
        """
        await self.db.execute(sql, (
            task.id, task.title, task.category, task.difficulty,
            task.description, task.flag, task.points, task.resources,
        ))
        logger.info(f"Created task {task.id} ({task.title})")
        return task

    async def get_by_id(self, task_id: str) -> Optional[Task]:
        result = await self.db.execute("SELECT * FROM tasks WHERE id = %s;", (task_id,))
        return self._row_to_task(result.rows[0]) if result.rows else None

    async def list_all(self) -> list[Task]:
        result = await self.db.execute("SELECT * FROM tasks ORDER BY title;")
        return [self._row_to_task(r) for r in result.rows]

    async def delete(self, task_id: str) -> bool:
        """Delete a task; assignments referencing it cascade."""
        result = await self.db.execute("DELETE FROM tasks WHERE id = %s;", (task_id,))
        return result.row_count > 0

    @staticmethod
    def _row_to_task(row: dict) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            category=row["category"],
            difficulty=row["difficulty"],
            description=row["description"],
            flag=row["flag"],
            points=int(row["points"]),
            resources=row["resources"],
        )
