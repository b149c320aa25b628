#!/usr/bin/env python3
"""
Database management script for the time tracking service.
Handles schema creation, teardown and task registration.
"""

import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from app.infrastructure.db.database import SessionLocal, create_tables, drop_tables
from app.infrastructure.db.models import TaskModel


def reset_database():
    """Reset database - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() == 'yes':
        print("Resetting database...")
        drop_tables()
        create_tables()
    else:
        print("Database reset cancelled.")


def add_task(task_id: str, project_id: str, task_type_id: str = None):
    """Register a task so time can be tracked against it."""
    session = SessionLocal()
    try:
        session.merge(TaskModel(id=task_id, project_id=project_id, task_type_id=task_type_id))
        session.commit()
        print(f"Task {task_id} registered under project {project_id}")
    finally:
        session.close()


def main():
    """Main CLI function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_db.py [command]")
        print("Commands:")
        print("  create                              - Create all tables")
        print("  drop                                - Drop all tables")
        print("  reset                               - Reset database (WARNING: drops all data)")
        print("  task <id> <project_id> [type_id]    - Register a task")
        return

    command_name = sys.argv[1]

    if command_name == "create":
        create_tables()
    elif command_name == "drop":
        drop_tables()
    elif command_name == "reset":
        reset_database()
    elif command_name == "task" and len(sys.argv) >= 4:
        add_task(*sys.argv[2:5])
    else:
        print(f"Unknown command: {command_name}")


if __name__ == "__main__":
    main()
