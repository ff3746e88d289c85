"""
models.py - SQLAlchemy ORM tables backing SqlStore.

Column names mirror the record fields in schemas.py. The surrogate ``pk``
column keeps insertion order; ``id`` is the public identifier.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


class IdSequence(Base):
    __tablename__ = "id_sequences"

    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class UserRow(Base):
    __tablename__ = "users"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    profile_image: Mapped[str] = mapped_column(String(500), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FarmRow(Base):
    __tablename__ = "farms"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    # No foreign key: a deleted farmer leaves the reference in place
    farmer_id: Mapped[str] = mapped_column(String(32), index=True)
    farmer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    image: Mapped[str] = mapped_column(String(500), default="")
    robot_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def gps_coordinates(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @gps_coordinates.setter
    def gps_coordinates(self, value: dict) -> None:
        self.latitude = value["latitude"]
        self.longitude = value["longitude"]


class RobotRow(Base):
    __tablename__ = "robots"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    farm_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    farm_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    engineer_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    engineer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    connectivity: Mapped[str] = mapped_column(String(20), nullable=False)
    battery_level: Mapped[int] = mapped_column(Integer, nullable=False)
    last_active: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SensorReadingRow(Base):
    __tablename__ = "sensor_readings"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    farm_id: Mapped[str] = mapped_column(String(32), index=True)
    farm_name: Mapped[str] = mapped_column(String(200), nullable=False)
    robot_id: Mapped[str] = mapped_column(String(32), index=True)
    robot_name: Mapped[str] = mapped_column(String(200), nullable=False)
    sensor_type: Mapped[str] = mapped_column(String(20), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
