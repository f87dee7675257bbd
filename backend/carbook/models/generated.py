from sqlalchemy import Column, Float, ForeignKey, Index, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Stores(Base):
    __tablename__ = 'stores'

    id = Column(Text, primary_key=True)
    owner_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    address = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    hours = relationship(
        'StoreHours',
        back_populates='store',
        cascade='all, delete-orphan',
        order_by='StoreHours.day_of_week',
    )
    services = relationship('Services', back_populates='store', cascade='all, delete-orphan')
    bookings = relationship('Bookings', back_populates='store')


class StoreHours(Base):
    __tablename__ = 'store_hours'
    __table_args__ = (
        UniqueConstraint('store_id', 'day_of_week'),
    )

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    open_time = Column(Text, nullable=False)
    close_time = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    break_start = Column(Text)
    break_end = Column(Text)

    store = relationship('Stores', back_populates='hours')


class Services(Base):
    __tablename__ = 'services'

    id = Column(Text, primary_key=True)
    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    available_days = Column(Text, nullable=False, server_default=text("'[]'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    description = Column(Text)

    store = relationship('Stores', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_store_date', 'store_id', 'booking_date'),
    )

    id = Column(Text, primary_key=True)
    store_id = Column(ForeignKey('stores.id'), nullable=False)
    store_name = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False, index=True)
    user_name = Column(Text, nullable=False)
    user_email = Column(Text, nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    service_name = Column(Text, nullable=False)
    service_duration_minutes = Column(Integer, nullable=False)
    service_price = Column(Float, nullable=False)
    booking_date = Column(Text, nullable=False)  # YYYY-MM-DD
    booking_time = Column(Text, nullable=False)  # HH:MM
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text)
    notes = Column(Text)

    store = relationship('Stores', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
