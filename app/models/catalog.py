from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

# Table models skip pydantic validation, so the bounds are also database checks.
_HOURS_CHECK = "start_hour >= 0 AND end_hour <= 24"


class Service(SQLModel, table=True):
    __tablename__ = "services"
    __table_args__ = (CheckConstraint("duration_minutes >= 1", name="ck_services_duration"),)
    id: str = Field(primary_key=True)
    name: str
    duration_minutes: int = Field(ge=1)


class Branch(SQLModel, table=True):
    __tablename__ = "branches"
    __table_args__ = (CheckConstraint(_HOURS_CHECK, name="ck_branches_hours"),)
    id: str = Field(primary_key=True)
    name: str
    start_hour: int = Field(ge=0, le=24)
    end_hour: int = Field(ge=0, le=24)  # exclusive, last appointment must end by end_hour:00


class Practitioner(SQLModel, table=True):
    __tablename__ = "practitioners"
    __table_args__ = (CheckConstraint(_HOURS_CHECK, name="ck_practitioners_hours"),)
    id: str = Field(primary_key=True)
    name: str
    start_hour: int = Field(ge=0, le=24)
    end_hour: int = Field(ge=0, le=24)
    branch_id: str | None = Field(default=None, foreign_key="branches.id", index=True)


class ServicePublic(SQLModel):
    id: str
    name: str
    duration_minutes: int


class BranchPublic(SQLModel):
    id: str
    name: str
    start_hour: int
    end_hour: int


class PractitionerPublic(SQLModel):
    id: str
    name: str
    start_hour: int
    end_hour: int
    branch_id: str | None = None
