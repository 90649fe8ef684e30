import re
from dataclasses import dataclass

from django.core.paginator import Paginator


_PAGE_SUFFIX_RE = re.compile(r'/page/(\d+)/?$')


def normalize_base_path(active_path):
    """현재 경로에서 앞뒤 '/'와 끝의 /page/<n>을 제거한 base path를 반환합니다.

    더 이상 바뀌지 않을 때까지 반복하므로 두 번 적용해도 결과가 같습니다.
    """
    if not isinstance(active_path, str):
        return ''

    base = active_path.lstrip('/')
    while True:
        stripped = _PAGE_SUFFIX_RE.sub('', base).rstrip('/')
        if stripped == base:
            return base
        base = stripped


def page_from_path(active_path):
    """경로 끝의 /page/<n>에서 페이지 번호를 읽습니다. 없으면 1."""
    if not isinstance(active_path, str):
        return 1
    match = _PAGE_SUFFIX_RE.search(active_path)
    if match is None:
        return 1
    return max(1, int(match.group(1)))


def _to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _page_href(base_path, page):
    root = f'/{base_path}' if base_path else ''
    if page == 1:
        return f'{root}/'
    return f'{root}/page/{page}'


@dataclass(frozen=True)
class PaginationState:
    current_page: int
    total_pages: int
    base_path: str
    prev_href: str = None
    next_href: str = None

    @property
    def has_prev(self):
        return self.prev_href is not None

    @property
    def has_next(self):
        return self.next_href is not None

    @property
    def is_paginated(self):
        """페이지가 2개 이상일 때만 이동 버튼을 그립니다."""
        return self.total_pages > 1


def resolve_pagination(active_path, current_page, total_pages):
    """이전/다음 링크를 포함한 PaginationState를 계산합니다.
    범위를 벗어난 값은 1..total_pages로 맞춥니다."""
    total_pages = max(1, _to_int(total_pages, 1))
    current_page = min(max(1, _to_int(current_page, 1)), total_pages)
    base_path = normalize_base_path(active_path)

    prev_href = None
    if current_page > 1:
        prev_href = _page_href(base_path, current_page - 1)

    next_href = None
    if current_page < total_pages:
        next_href = _page_href(base_path, current_page + 1)

    return PaginationState(
        current_page=current_page,
        total_pages=total_pages,
        base_path=base_path,
        prev_href=prev_href,
        next_href=next_href,
    )


def select_visible(posts, override=None):
    """미리 잘라 둔 목록(override)이 있으면 그것을, 없으면 posts를 그대로 반환합니다."""
    if override:
        return override
    return posts


def paginate_posts(posts, page, per_page):
    """(해당 페이지 게시글, 현재 페이지, 전체 페이지 수)를 반환합니다.
    범위를 벗어난 페이지는 EmptyPage/PageNotAnInteger를 올립니다."""
    paginator = Paginator(posts, per_page)
    page_obj = paginator.page(page)
    return list(page_obj.object_list), page_obj.number, paginator.num_pages
