"""Serializers for rooms and blockages."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Blockage, Room


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = ["id", "name", "size", "beds", "sort_order"]


class BlockageSerializer(serializers.ModelSerializer):
    rooms = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    all_rooms = serializers.SerializerMethodField()

    class Meta:
        model = Blockage
        fields = ["id", "start_date", "end_date", "rooms", "all_rooms", "reason", "created_at"]
        read_only_fields = fields

    def get_all_rooms(self, obj: Blockage) -> bool:
        return not obj.rooms.exists()


class BlockageWriteSerializer(serializers.Serializer):
    """Input for creating a blockage. ``end_date`` is exclusive like every range."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    rooms = serializers.ListField(
        child=serializers.CharField(max_length=10),
        required=False,
        default=list,
    )
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
