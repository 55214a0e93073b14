"""
models/task.py
--------------
Domain model for hackathon tasks (challenge reference data).
"""

from dataclasses import dataclass


@dataclass
class Task:
    id: str
    title: str
    category: str
    difficulty: str  # 'easy' | 'medium' | 'hard'
    description: str
    flag: str
    points: int
    resources: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "difficulty": self.difficulty,
            "description": self.description,
            "flag": self.flag,
            "points": self.points,
            "resources": self.resources,
        }
