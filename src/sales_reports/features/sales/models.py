"""Data models for the sales store: users, groups, their memberships and individual sales.

The report engine never goes through these models at query time (it issues
raw parameterized SQL against the same tables), but they define the tables
and are what tests and the CLI use to create and inspect data."""

from tortoise import fields, models
from ...common.models import TimestampMixin, generate_ksuid


class User(TimestampMixin):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)

    sales: fields.ReverseRelation["Sale"]
    memberships: fields.ReverseRelation["UserGroup"]

    def __str__(self):
        return self.name

    class Meta:
        table = "users"


class Group(TimestampMixin):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255, unique=True)

    memberships: fields.ReverseRelation["UserGroup"]

    def __str__(self):
        return self.name

    class Meta:
        table = "groups"


class UserGroup(models.Model):  # No TimestampMixin, plain join table
    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="memberships", on_delete=fields.CASCADE
    )
    group: fields.ForeignKeyRelation[Group] = fields.ForeignKeyField(
        "models.Group", related_name="memberships", on_delete=fields.CASCADE
    )

    class Meta:
        table = "user_groups"
        unique_together = (("user", "group"),)


class Sale(models.Model):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="sales", on_delete=fields.RESTRICT
    )
    amount = fields.FloatField()
    date = fields.DatetimeField(db_index=True)

    def __str__(self):
        return f"Sale {self.public_id} ({self.amount:.2f} on {self.date:%Y-%m-%d})"

    class Meta:
        table = "sales"
