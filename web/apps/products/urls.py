from django.urls import path
from .views import ProductsCollectionView, RetrieveProductView
app_name = "products"

urlpatterns = [
    path("", ProductsCollectionView.as_view(), name="products-collection"),
    path("<uuid:pid>/", RetrieveProductView.as_view(), name="products-detail"),
]
