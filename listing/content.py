import functools
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from enum import IntEnum
from pathlib import Path

import yaml
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .utils import _parse_bool, _parse_date, _parse_tags, extract_frontmatter_and_body

logger = logging.getLogger(__name__)


class PostType(IntEnum):
    """게시글 언어 구분. 값은 frontmatter의 postType과 같습니다."""
    VIETNAMESE = 0
    ENGLISH = 1

    @property
    def key(self):
        return self.name.lower()

    @property
    def label(self):
        return _POST_TYPE_LABELS[self]

    @classmethod
    def from_raw(cls, raw_value):
        """frontmatter 값을 PostType으로 변환합니다. 알 수 없는 값은 None."""
        try:
            return cls(int(raw_value))
        except (TypeError, ValueError):
            return None


_POST_TYPE_LABELS = {
    PostType.VIETNAMESE: 'Tiếng Việt',
    PostType.ENGLISH: 'English',
}

# 태그 패널에 노출되는 순서
SECTION_ORDER = (PostType.ENGLISH, PostType.VIETNAMESE)


@dataclass(frozen=True)
class Post:
    path: str
    date: str
    title: str
    summary: str = ''
    tags: tuple = field(default_factory=tuple)
    post_type: PostType = None
    draft: bool = False

    @property
    def published_on(self):
        """템플릿의 date 필터용 date/datetime 객체. 해석할 수 없으면 None."""
        try:
            return parse_datetime(self.date) or parse_date(self.date)
        except (TypeError, ValueError):
            return None


def post_from_meta(path, meta):
    """frontmatter 메타데이터로 Post를 생성합니다."""
    return Post(
        path=path,
        date=_parse_date(meta.get('date')),
        title=str(meta.get('title') or path.rsplit('/', 1)[-1]),
        summary=str(meta.get('summary') or ''),
        tags=tuple(_parse_tags(meta.get('tags', []))),
        post_type=PostType.from_raw(meta.get('postType')),
        draft=_parse_bool(meta.get('draft', False)),
    )


_OLDEST = datetime.min.replace(tzinfo=dt_timezone.utc)


def _published_key(post):
    published = post.published_on
    if published is None:
        return (False, _OLDEST)
    if not isinstance(published, datetime):
        published = datetime(published.year, published.month, published.day)
    if timezone.is_naive(published):
        published = timezone.make_aware(published, dt_timezone.utc)
    return (True, published)


def sort_posts(posts):
    """날짜 내림차순으로 정렬합니다. 시간대가 달라도 실제 시각으로 비교하고,
    날짜를 해석할 수 없는 게시글은 맨 뒤에 둡니다."""
    return sorted(posts, key=_published_key, reverse=True)


# ---------------------------------------------------------------------------
# 디스크에서 읽기
# ---------------------------------------------------------------------------

def load_posts(posts_dir, include_drafts=False):
    """posts_dir 아래 .md 파일을 읽어 날짜 내림차순 Post 리스트를 반환합니다.
    읽을 수 없는 파일은 경고를 남기고 건너뜁니다."""
    root = Path(posts_dir)
    if not root.is_dir():
        logger.warning('Posts directory %s does not exist; corpus is empty', root)
        return []

    posts = []
    for filepath in sorted(root.rglob('*.md')):
        relative = filepath.relative_to(root).with_suffix('').as_posix()
        try:
            content = filepath.read_text(encoding='utf-8')
            meta, _body = extract_frontmatter_and_body(content)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            logger.warning('Skipping post %s: %s', filepath, exc)
            continue

        post = post_from_meta(f'blog/{relative}', meta)
        if post.draft and not include_drafts:
            continue
        posts.append(post)

    logger.info('Loaded %d posts from %s', len(posts), root)
    return sort_posts(posts)


def load_tag_counts(filepath):
    """{slug: count} 형태의 JSON 파일을 읽습니다.
    파일이 없거나 읽을 수 없으면 None을 반환해 실시간 카운트를 쓰게 합니다."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.warning('Tag data file %s not found', filepath)
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning('Could not read tag data file %s: %s', filepath, exc)
        return None

    if not isinstance(raw, dict):
        logger.warning('Tag data file %s is not a JSON object', filepath)
        return None

    counts = {}
    for tag_slug, count in raw.items():
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            logger.warning('Ignoring count %r for tag %r in %s', count, tag_slug, filepath)
            continue
        counts[str(tag_slug)] = count
    return counts


def _setting_path(name, default_dirname):
    value = getattr(settings, name, None)
    if value:
        return Path(value)
    return Path(getattr(settings, 'BASE_DIR', '.')) / default_dirname


def tag_data_path(post_type, tag_data_dir=None):
    if tag_data_dir is None:
        tag_data_dir = _setting_path('TAG_DATA_DIR', 'data')
    return Path(tag_data_dir) / f'tag-data-{post_type.key}.json'


def write_tag_counts(filepath, counts):
    """태그 카운트를 정렬된 JSON으로 기록합니다."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(dict(sorted(counts.items())), f, ensure_ascii=False, indent=2)
        f.write('\n')


# ---------------------------------------------------------------------------
# 프로세스 단위 캐시
# ---------------------------------------------------------------------------

@functools.lru_cache(maxsize=1)
def get_all_posts():
    """settings.POSTS_DIR의 게시글을 한 번만 읽어 tuple로 반환합니다."""
    posts_dir = _setting_path('POSTS_DIR', 'posts')
    return tuple(load_posts(posts_dir))


@functools.lru_cache(maxsize=1)
def get_tag_counts():
    """언어별 외부 태그 카운트 테이블. 파일이 없거나 깨진 언어는 포함하지 않습니다."""
    tables = {}
    for post_type in PostType:
        filepath = tag_data_path(post_type)
        if filepath.is_file():
            counts = load_tag_counts(filepath)
            if counts is not None:
                tables[post_type] = counts
    return tables


def clear_caches():
    get_all_posts.cache_clear()
    get_tag_counts.cache_clear()
