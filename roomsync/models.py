from tortoise import fields
from tortoise.models import Model


class Room(Model):
    """Collaboration room; the name is its public identity."""

    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=100, unique=True, index=True)
    # ``None`` for open rooms
    password_hash = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    screens: fields.ReverseRelation["Screen"]

    class Meta:
        table = "rooms"


class Screen(Model):
    """A canvas inside a room with its device descriptor and components."""

    id = fields.IntField(pk=True)
    room: fields.ForeignKeyRelation[Room] = fields.ForeignKeyField(
        "models.Room", related_name="screens", on_delete=fields.CASCADE
    )
    name = fields.CharField(max_length=100)
    # {"name": str, "width": int, "height": int}
    device = fields.JSONField()
    # List of component objects, each with ``id``, ``xRatio`` and ``yRatio``
    components = fields.JSONField(default=list)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "screens"
