"""Health endpoint probing the database and the catalog tables."""
import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

from apps.products.models import ProductModel

logger = logging.getLogger("gateway")


def health_view(_request):
    db_ok = False
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1;")
        db_ok = True
    except DatabaseError:
        logger.exception("health check: database unreachable")

    catalog = {"ok": False}
    if db_ok:
        try:
            catalog = {"ok": True, "active_products": ProductModel.objects.filter(is_active=True).count()}
        except DatabaseError:
            logger.exception("health check: products table unavailable")

    ok = db_ok and catalog["ok"]
    return JsonResponse(
        {"ok": ok, "components": {"db": {"ok": db_ok}, "catalog": catalog}},
        status=200 if ok else 503,
    )
