"""
schemas.py - Pydantic entity records and request/response models.

Records are immutable snapshots owned by the store. Python code uses
snake_case field names; the wire format is camelCase.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

Role = Literal["admin", "engineer", "farmer"]
UserStatus = Literal["active", "pending_approval", "rejected"]
FarmStatus = Literal["active", "inactive"]
RobotStatus = Literal["available", "in-use", "maintenance"]
Connectivity = Literal["online", "offline"]
SensorType = Literal["temperature", "humidity", "soil_ph", "light"]


def _as_utc(value: datetime) -> datetime:
    # Naive instants (e.g. from SQLite) are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Record(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid"
    )

    id: str


# ── Entities ─────────────────────────────────────────────────────────────────

class GpsCoordinates(CamelModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class User(Record):
    first_name: str
    last_name: str
    email: str
    phone: str
    role: Role
    status: UserStatus
    profile_image: str = ""
    created_at: UtcDatetime

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Farm(Record):
    name: str
    location: str
    gps_coordinates: GpsCoordinates
    farmer_id: str
    farmer_name: str
    image: str = ""
    robot_count: int = Field(default=0, ge=0)
    status: FarmStatus = "active"
    created_at: UtcDatetime


class Robot(Record):
    name: str
    farm_id: str | None = None
    farm_name: str | None = None
    engineer_id: str | None = None
    engineer_name: str | None = None
    status: RobotStatus = "available"
    connectivity: Connectivity = "online"
    battery_level: int = Field(default=100, ge=0, le=100)
    last_active: UtcDatetime

    @model_validator(mode="after")
    def _pairs_in_sync(self):
        if (self.farm_id is None) != (self.farm_name is None):
            raise ValueError("farm_id and farm_name must be set or cleared together")
        if (self.engineer_id is None) != (self.engineer_name is None):
            raise ValueError("engineer_id and engineer_name must be set or cleared together")
        return self


class SensorReading(Record):
    farm_id: str
    farm_name: str
    robot_id: str
    robot_name: str
    sensor_type: SensorType
    value: float
    unit: str
    timestamp: UtcDatetime


# ── Users ────────────────────────────────────────────────────────────────────

class UserCreate(CamelModel):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(min_length=10)
    role: Role
    status: UserStatus | None = None
    profile_image: str = ""


class UserUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=2)
    last_name: str | None = Field(default=None, min_length=2)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=10)
    role: Role | None = None
    status: UserStatus | None = None
    profile_image: str | None = None


# ── Farms ────────────────────────────────────────────────────────────────────

class FarmCreate(CamelModel):
    name: str = Field(min_length=1)
    location: str
    gps_coordinates: GpsCoordinates
    farmer_id: str
    image: str = ""
    status: FarmStatus = "active"


class FarmUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    location: str | None = None
    gps_coordinates: GpsCoordinates | None = None
    farmer_id: str | None = None
    image: str | None = None
    status: FarmStatus | None = None


# ── Robots ───────────────────────────────────────────────────────────────────

class RobotCreate(CamelModel):
    name: str = Field(min_length=1)
    farm_id: str | None = None
    engineer_id: str | None = None
    status: RobotStatus = "available"
    connectivity: Connectivity = "online"
    battery_level: int = Field(default=100, ge=0, le=100)


class RobotUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    farm_id: str | None = None
    engineer_id: str | None = None
    status: RobotStatus | None = None
    connectivity: Connectivity | None = None
    battery_level: int | None = Field(default=None, ge=0, le=100)


class AssignEngineerRequest(CamelModel):
    robot_ids: list[str]
    engineer_id: str


# ── Sensor Data ──────────────────────────────────────────────────────────────

class SensorReadingCreate(CamelModel):
    robot_id: str
    farm_id: str | None = None
    sensor_type: SensorType
    value: float
    unit: str | None = None
    timestamp: datetime | None = None


# ── Dashboard ────────────────────────────────────────────────────────────────

class ChartPoint(CamelModel):
    name: str
    value: int


class RobotStatusDistribution(CamelModel):
    available: int = 0
    in_use: int = 0
    maintenance: int = 0


class DashboardStats(CamelModel):
    total_farms: int
    active_farms: int
    total_robots: int
    total_engineers: int
    total_farmers: int
    robot_status_distribution: RobotStatusDistribution


class SensorTypeSummary(CamelModel):
    sensor_type: SensorType
    unit: str
    count: int
    minimum: float
    maximum: float
    average: float
    latest_value: float
    latest_timestamp: datetime
