from sqlmodel import Field, SQLModel


class RoleAssignment(SQLModel, table=True):
    """The single active role of an actor."""

    actor_id: str = Field(primary_key=True)
    role: str = "participant"  # "participant", "judge", "admin"
