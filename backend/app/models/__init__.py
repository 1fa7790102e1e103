from app.models.user import User
from app.models.rental_record import RentalRecord
from app.models.service_record import ServiceRecord

__all__ = ["User", "RentalRecord", "ServiceRecord"]
