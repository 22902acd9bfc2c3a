"""API views for the booking domain."""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.infrastructure.pagination import LimitPageNumberPagination

from .application.command_handlers import (
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    SignContractCommand,
    SignContractHandler,
    get_booking,
    list_bookings,
)
from .serializers import (
    BookingCreateSerializer,
    BookingListQuerySerializer,
    BookingSerializer,
    BookingStatusSerializer,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Bookings of the current user.

    Access rules live in the command handlers; domain errors are turned
    into responses by the project exception handler.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = LimitPageNumberPagination
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        query = BookingListQuerySerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        return list_bookings(
            self.request.user,
            status=query.validated_data.get("status"),
            listing_id=query.validated_data.get("listing"),
            as_owner=query.validated_data["as_owner"],
        )

    def get_object(self):  # type: ignore
        return get_booking(int(self.kwargs["pk"]), self.request.user)

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str),
            OpenApiParameter("listing", int),
            OpenApiParameter("as_owner", bool),
            OpenApiParameter("limit", int),
        ],
    )
    def list(self, request, *args, **kwargs):  # type: ignore
        return super().list(request, *args, **kwargs)

    @extend_schema(request=BookingCreateSerializer, responses=BookingSerializer)
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = CreateBookingHandler().handle(CreateBookingCommand(
            listing_id=data["listing"],
            advertiser=request.user,
            start_date=data["start_date"],
            end_date=data["end_date"],
            payment_method=data.get("payment_method"),
            payer_contact=data.get("payer_contact") or None,
        ))
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(request=BookingStatusSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = ChangeBookingStatusHandler().handle(ChangeBookingStatusCommand(
            booking_id=int(pk),
            status=serializer.validated_data["status"],
            actor=request.user,
        ))
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="sign-contract")
    def sign_contract(self, request, pk=None):  # type: ignore
        booking = SignContractHandler().handle(SignContractCommand(
            booking_id=int(pk),
            actor=request.user,
        ))
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)
