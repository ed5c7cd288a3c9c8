"""URL configuration for Turnstile.

The admission core is a library-level contract; no HTTP routes are exposed here.
"""

from django.urls import URLPattern, URLResolver

urlpatterns: list[URLPattern | URLResolver] = []
