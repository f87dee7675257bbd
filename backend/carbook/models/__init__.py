from .generated import Base, Bookings, Services, StoreHours, Stores, metadata

__all__ = ["Base", "metadata", "Stores", "StoreHours", "Services", "Bookings"]
