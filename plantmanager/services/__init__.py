"""
Service Organization
====================

**reminder_store**
  Durable, ordered, deduplicated plant reminder persistence.

**application/**
  Services that implement the reminder screens on top of the store.
  Built once per process by ``ServiceContainer``.
"""
