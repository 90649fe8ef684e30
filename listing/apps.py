"""
Django app metadata for the blog listing application.
"""
from django.apps import AppConfig


class ListingConfig(AppConfig):
    """
    Tag index, pagination and asset paths for the multilingual post list.
    """

    name = "listing"
    verbose_name = "Blog Listing"

    def ready(self):
        from . import signals  # noqa: F401
