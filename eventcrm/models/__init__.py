from eventcrm.models.models import Client, Employee, Event, User

__all__ = ["Client", "Employee", "Event", "User"]
