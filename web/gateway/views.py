from django.http import JsonResponse


def not_found(request, exception=None):
    """JSON body for URLs no route matches, e.g. a malformed order id."""
    return JsonResponse({"detail": "NOT_FOUND", "message": "Resource not found", "path": request.path}, status=404)
