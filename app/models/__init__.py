# Fleet booking — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.account import Account                 # noqa
from app.models.vehicle import Vehicle                 # noqa
from app.models.trip import Trip, TripStatus           # noqa
