import unicodedata
from operator import attrgetter

from .content import SECTION_ORDER, PostType


def _is_slug_char(ch):
    # 결합 문자(성조 부호 등)는 남김
    return ch in '-_ ' or ch.isalnum() or unicodedata.category(ch).startswith('M')


def slug(tag):
    """태그 표시 문자열을 URL용 slug로 변환합니다 (github-slugger 규칙).
    NFD로 저장된 태그도 NFC 태그와 같은 slug가 되도록 먼저 정규화합니다."""
    value = unicodedata.normalize('NFC', str(tag)).lower()
    value = ''.join(ch for ch in value if _is_slug_char(ch))
    return value.replace(' ', '-')


def count_tags(posts):
    """게시글별로 한 번씩 센 {slug: count}를 반환합니다."""
    tag_count = {}
    for post in posts:
        seen_in_post = set()
        for raw_tag in post.tags or ():
            tag = slug(raw_tag)
            if not tag or tag in seen_in_post:
                continue
            seen_in_post.add(tag)
            tag_count[tag] = tag_count.get(tag, 0) + 1
    return tag_count


def distinct_tags(posts):
    """처음 등장한 순서를 유지하며 중복 없는 태그 목록을 반환합니다 (대소문자 구분)."""
    seen = set()
    tags = []
    for post in posts:
        for tag in post.tags or ():
            if tag in seen:
                continue
            seen.add(tag)
            tags.append(tag)
    return tags


def rank_tags(tags, counts):
    """카운트 내림차순으로 정렬합니다. 동률은 입력 순서를 유지합니다."""
    return sorted(tags, key=lambda t: counts.get(slug(t), 0), reverse=True)


def _partition_posts(posts, partition_of, partitions):
    if partitions is None:
        grouped = {}
    else:
        grouped = {partition: [] for partition in partitions}
    for post in posts:
        partition = partition_of(post)
        if partition is None:
            continue
        if partition not in grouped:
            if partitions is not None:
                continue
            grouped[partition] = []
        grouped[partition].append(post)
    return grouped


def _counts_for(partition, members, counts):
    # 외부 테이블이 있으면 그대로 쓰고, 없으면 현재 게시글로 계산
    table = (counts or {}).get(partition)
    if table is None:
        return count_tags(members)
    return table


def build_tag_index(posts, partition_of=attrgetter('post_type'), counts=None,
                    partitions=tuple(PostType)):
    """언어별 인기순 태그 목록 {partition: [tag, ...]}을 반환합니다.

    counts는 {partition: {slug: count}} 형태의 외부 카운트 테이블입니다.
    테이블이 있는 언어는 그 값으로 정렬하고, 없는 언어는 게시글에서 직접 셉니다.
    partitions=None이면 게시글에 나타난 언어만 포함합니다.
    """
    index = {}
    for partition, members in _partition_posts(posts, partition_of, partitions).items():
        table = _counts_for(partition, members, counts)
        index[partition] = rank_tags(distinct_tags(members), table)
    return index


def build_tag_sections(posts, counts=None, active_path=''):
    """태그 패널에 쓸 언어별 섹션 목록을 만듭니다. 태그가 없는 언어는 제외합니다."""
    active_path = active_path if isinstance(active_path, str) else ''
    grouped = _partition_posts(posts, attrgetter('post_type'), SECTION_ORDER)

    sections = []
    for post_type in SECTION_ORDER:
        members = grouped[post_type]
        table = _counts_for(post_type, members, counts)
        tags = rank_tags(distinct_tags(members), table)
        if not tags:
            continue
        items = []
        for tag in tags:
            tag_slug = slug(tag)
            items.append({
                'name': tag,
                'slug': tag_slug,
                'count': table.get(tag_slug, 0),
                'href': f'/tags/{tag_slug}',
                'active': f'/tags/{tag_slug}' in active_path,
            })
        sections.append({
            'key': post_type.key,
            'label': post_type.label,
            'tags': items,
        })
    return sections


def filter_posts_by_tag(posts, tag_slug):
    """slug가 일치하는 태그를 가진 게시글만 남깁니다."""
    return [
        post for post in posts
        if any(slug(tag) == tag_slug for tag in post.tags or ())
    ]
