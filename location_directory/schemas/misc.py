# location_directory/schemas/misc.py
from pydantic import BaseModel


class HealthStatus(BaseModel):
    """
    Liveness answer, naming the location store backend in use.
    """

    status: str
    store: str
