from plantmanager.blueprints.api.reminders import reminders_api

__all__ = ["reminders_api"]
