"""HTTP views for the catalog.

Read-only endpoints listing active products. Inactive products are
hidden from both the collection and the detail endpoint.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .repository import ProductRepository
from .schemas import ProductReadDTO

logger = logging.getLogger("products")


def _dump(product) -> dict:
    return ProductReadDTO.model_validate(product).model_dump(mode="json", by_alias=True)


class ProductsCollectionView(APIView):
    """List active products, newest first."""

    def get(self, request):
        try:
            products = ProductRepository().list_active()
        except Exception:
            logger.exception("failed to fetch products")
            return Response(
                {"detail": "INTERNAL_ERROR", "message": "Failed to fetch products"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response([_dump(p) for p in products], status=status.HTTP_200_OK)


class RetrieveProductView(APIView):
    def get(self, request, pid):
        try:
            product = ProductRepository().find_active(pid)
        except Exception:
            logger.exception("failed to fetch product", extra={"product_id": str(pid)})
            return Response(
                {"detail": "INTERNAL_ERROR", "message": "Failed to fetch product"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        if product is None:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        return Response(_dump(product), status=status.HTTP_200_OK)
