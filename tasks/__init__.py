"""
Celery tasks module
Import all tasks here so Celery can discover them
"""
from . import email_tasks

__all__ = ['email_tasks']
