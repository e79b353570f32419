"""
Task subsystem.

Components:
- task_models.py: data structures (Task, recurrence variants)
- recurrence.py: due-date rules and human-readable descriptions
- task_store.py: in-memory per-user store with a global id counter
- task_persistence.py: JSON file persistence for the store
- task_api.py: command argument parsing/validation
- task_format.py: plain-text rendering of tasks
"""
