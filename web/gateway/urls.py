from django.urls import include, path

urlpatterns = [
    path("api/orders/", include("apps.orders.urls")),
    path("api/products/", include("apps.products.urls")),
    path("", include("apps.monitoring.urls")),
]

handler404 = "gateway.views.not_found"
