from django.conf import settings

from .content import get_all_posts, get_tag_counts
from .tag_utils import build_tag_sections


def tag_sections(request):
    active_path = request.path_info
    return {
        'base_path': getattr(settings, 'BASE_PATH', '') or '',
        'all_posts_active': active_path.startswith('/blog'),
        'tag_sections': build_tag_sections(get_all_posts(), get_tag_counts(), active_path),
    }
