"""HTTP views for the orders app.

This module contains DRF API views used by the orders service. Views are
kept intentionally small: they validate requests (via Pydantic), map to
domain DTOs, delegate to the domain service, and map domain errors to
HTTP responses:

- ``InvalidRequest`` (empty order, insufficient stock) -> 400
- ``NotFound`` (unknown product or order) -> 404
- anything else -> 500 with a generic message; the cause is only logged.

The views obtain a configured ``OrderService`` from
``providers.get_order_service()``.

Idempotency: when an ``Idempotency-Key`` header is provided, the create
endpoint stores the response of the first request. Retries with the same
payload replay it with the original status code and an
``Idempotent-Replay: true`` header. Reusing the key with a different
payload returns HTTP 409.
"""
import json
import logging

from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import providers
from .errors import InvalidRequest, NotFound
from .idempotency import IdempotencyConflict, IdempotencyInProgress, finalize, get_or_create_idempotent
from .models import IDEMPOTENCY_KEY_MAX_LENGTH
from .schemas import CreateOrderDTO, OrderReadDTO

logger = logging.getLogger("orders")


def _error(detail: str, message: str, http_status: int, **extra) -> Response:
    body = {"detail": detail, "message": message, **extra}
    return Response(body, status=http_status)


class OrdersPingView(APIView):
    """Liveness endpoint for the orders module."""

    def get(self, request):
        return Response({"ok": True})


class OrdersCollectionView(APIView):
    """List orders and create new ones.

    ``GET`` returns every hydrated order, newest first. ``POST`` validates
    the payload, places the order through the domain service and returns
    the hydrated order with HTTP 201.
    """
    throttle_classes = [ScopedRateThrottle]

    def get_throttles(self):
        # DRF evaluates throttles in initial(), before get/post
        self.throttle_scope = "orders_list" if self.request.method == "GET" else "orders_create"
        return [throttle() for throttle in self.throttle_classes]

    def get(self, request):
        try:
            orders = providers.get_order_service().find_all()
        except Exception:
            logger.exception("failed to fetch orders")
            return _error("INTERNAL_ERROR", "Failed to fetch orders", status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response([OrderReadDTO.render(o) for o in orders], status=status.HTTP_200_OK)

    def post(self, request):
        """Create a new order.

        Args:
            request (Request): DRF request with JSON body and optional
                ``Idempotency-Key`` header.

        Returns:
            Response: One of the following responses.
            - 201 with the hydrated order.
            - 400 with {detail: "VALIDATION_ERROR", errors} when the
              payload is malformed.
            - 400 with {detail: "EMPTY_ORDER" | "INSUFFICIENT_STOCK"}.
            - 400 with {detail: "INVALID_IDEMPOTENCY_KEY"} when the header
              is longer than the stored key column.
            - 404 with {detail: "NOT_FOUND", id} for an unknown or
              inactive product.
            - 409 with {detail: "IDEMPOTENCY_CONFLICT"} or
              {detail: "IDEMPOTENCY_IN_PROGRESS"}.
            - 500 with {detail: "INTERNAL_ERROR"} on any other failure.
            - The stored status and body when an idempotent request is
              replayed.
        """
        idem_key = request.headers.get("Idempotency-Key")
        if idem_key and len(idem_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
            return _error(
                "INVALID_IDEMPOTENCY_KEY",
                f"Idempotency-Key must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters",
                status.HTTP_400_BAD_REQUEST,
            )

        # 1) Pydantic validation
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except ValidationError as e:
            return Response(
                {"detail": "VALIDATION_ERROR", "errors": json.loads(e.json(include_url=False))},
                status=status.HTTP_400_BAD_REQUEST,
            )

        # 2) Idempotency get-or-create
        rec = None
        if idem_key:
            try:
                existing, rec = get_or_create_idempotent(idem_key, request.data)
            except IdempotencyConflict:
                return Response({"detail": "IDEMPOTENCY_CONFLICT"}, status=status.HTTP_409_CONFLICT)
            except IdempotencyInProgress:
                return Response({"detail": "IDEMPOTENCY_IN_PROGRESS"}, status=status.HTTP_409_CONFLICT)
            if existing:
                resp = Response(rec.response_body, status=rec.response_status)
                resp["Idempotent-Replay"] = "true"
                return resp

        # 3) Domain
        try:
            order = providers.get_order_service().create_order(dto.to_domain())
        except InvalidRequest as e:
            resp = _error(e.code, e.message, status.HTTP_400_BAD_REQUEST)
        except NotFound as e:
            resp = _error(e.code, e.message, status.HTTP_404_NOT_FOUND, id=str(e.id))
        except Exception:
            logger.exception("failed to create order")
            resp = _error("INTERNAL_ERROR", "Failed to create order", status.HTTP_500_INTERNAL_SERVER_ERROR)
        else:
            resp = Response(OrderReadDTO.render(order), status=status.HTTP_201_CREATED)
            if rec:
                finalize(rec, resp.status_code, resp.data, order_id=order.id)
            return resp

        if rec:
            finalize(rec, resp.status_code, resp.data)
        return resp


class RetrieveOrderView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_detail"

    def get(self, request, oid):
        try:
            order = providers.get_order_service().find_one(oid)
        except NotFound as e:
            return _error(e.code, e.message, status.HTTP_404_NOT_FOUND, id=str(e.id))
        except Exception:
            logger.exception("failed to fetch order", extra={"order_id": str(oid)})
            return _error("INTERNAL_ERROR", "Failed to fetch order", status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(OrderReadDTO.render(order), status=status.HTTP_200_OK)
