"""Room and blockage API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.value_objects import DateRange

from .filters import BlockageFilterSet
from .models import Blockage, Room
from .serializers import BlockageSerializer, BlockageWriteSerializer, RoomSerializer
from .services import create_blockage, delete_blockage


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    """Room reference data, readable by anyone."""

    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    permission_classes = [permissions.AllowAny]


class BlockageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Admin management of blockages. Blockages are created and deleted, never edited."""

    queryset = Blockage.objects.prefetch_related("rooms").all()
    serializer_class = BlockageSerializer
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BlockageFilterSet

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BlockageWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        blockage = create_blockage(
            DateRange(data["start_date"], data["end_date"]),
            room_ids=data["rooms"],
            reason=data["reason"],
        )
        read_serializer = BlockageSerializer(blockage, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        blockage = self.get_object()
        delete_blockage(blockage.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
