from django.conf import settings
from django.core.paginator import InvalidPage
from django.http import Http404
from django.shortcuts import render

from .content import get_all_posts
from .pagination import paginate_posts, resolve_pagination, select_visible
from .tag_utils import filter_posts_by_tag, slug


def _render_list(request, posts, title, page):
    per_page = getattr(settings, 'POSTS_PER_PAGE', 5)
    try:
        page_posts, current_page, total_pages = paginate_posts(posts, page, per_page)
    except InvalidPage:
        raise Http404('페이지를 찾을 수 없습니다.')

    pagination = resolve_pagination(request.path_info, current_page, total_pages)
    return render(request, 'listing/post_list.html', {
        'title': title,
        'posts': select_visible(posts, page_posts),
        'pagination': pagination,
    })


def post_list(request, page=1):
    return _render_list(request, list(get_all_posts()), 'All Posts', page)


def tag_post_list(request, tag, page=1):
    # URL의 slug가 NFD로 들어와도 같은 태그로 찾음
    tag = slug(tag)
    posts = filter_posts_by_tag(get_all_posts(), tag)
    if not posts:
        raise Http404('태그를 찾을 수 없습니다.')

    # 제목은 가장 최근 게시글에 적힌 태그 표기를 사용
    title = next(t for t in posts[0].tags if slug(t) == tag)
    return _render_list(request, posts, title, page)
