"""
These settings are here to use during tests, because django requires them.

In a real-world use case, the listing app is installed into a site project,
so these settings will not be used.
"""
import tempfile
from os.path import abspath, dirname, join


def root(*args):
    """
    Get the absolute path of the given path relative to the project root.
    """
    return join(abspath(dirname(__file__)), *args)


BASE_DIR = root()

DATABASES = {}

INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "listing.apps.ListingConfig",
]

MIDDLEWARE = [
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "projects.urls"

SECRET_KEY = "insecure-secret-key"

USE_TZ = True

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "listing.context_processors.tag_sections",
            ],
        },
    },
]

STATIC_URL = 'static/'

######################### Blog listing ########################

BASE_PATH = ""

# 테스트는 각자 override_settings로 임시 디렉토리를 지정함
POSTS_DIR = tempfile.mkdtemp(prefix="test_posts_")
TAG_DATA_DIR = tempfile.mkdtemp(prefix="test_tag_data_")
POSTS_PER_PAGE = 2
