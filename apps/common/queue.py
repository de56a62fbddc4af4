"""
Django-Q2 queue utilities for the Optician Marketplace
Tasks are enqueued by dotted path so apps never import each other's task modules.
"""

from __future__ import annotations

from typing import Any

from django_q.tasks import async_task


def queue_by_name(func_path: str, *args: Any, **kwargs: Any) -> str:
    """Enqueue a task by dotted path; returns the django-q task id."""
    return async_task(func_path, *args, **kwargs)
