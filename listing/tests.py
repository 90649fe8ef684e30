import io
import json
import os
import shutil
import tempfile
import unicodedata
from urllib.parse import quote

import yaml
from django.core.management import call_command
from django.core.paginator import EmptyPage
from django.template import Context, Template
from django.test import SimpleTestCase, override_settings
from django.urls import resolve

from listing import content, utils
from listing.content import Post, PostType
from listing.pagination import (
    PaginationState, normalize_base_path, page_from_path,
    paginate_posts, resolve_pagination, select_visible,
)
from listing.tag_utils import (
    build_tag_index, build_tag_sections, count_tags,
    distinct_tags, filter_posts_by_tag, rank_tags, slug,
)


def _post(path, tags, post_type=PostType.ENGLISH, date='2024-01-01'):
    return Post(path=path, date=date, title=path, tags=tuple(tags), post_type=post_type)


def _write_post(directory, name, **meta):
    """frontmatter가 있는 .md 파일을 만듭니다."""
    body = meta.pop('body', '본문입니다.')
    filepath = os.path.join(directory, f'{name}.md')
    os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write('---\n')
        f.write(yaml.safe_dump(meta, allow_unicode=True))
        f.write('---\n\n')
        f.write(body)
    return filepath


def _make_site_dirs():
    """뷰 테스트용 게시글 3개(+draft 1개)와 영어 태그 카운트 파일을 만듭니다."""
    posts_dir = tempfile.mkdtemp(prefix='test_posts_')
    tag_data_dir = tempfile.mkdtemp(prefix='test_tag_data_')
    _write_post(posts_dir, 'first-post', title='First Post', date='2024-01-01',
                tags=['Python', 'Django'], summary='첫 번째 요약', postType=1)
    _write_post(posts_dir, 'second-post', title='Second Post', date='2024-01-02',
                tags=['Python'], summary='두 번째 요약', postType=1)
    _write_post(posts_dir, 'third-post', title='Third Post', date='2024-01-03',
                tags=['Du lịch'], summary='Tóm tắt', postType=0)
    _write_post(posts_dir, 'hidden-post', title='Hidden Post', date='2024-01-04',
                tags=['Secret'], draft=True, postType=1)
    with open(os.path.join(tag_data_dir, 'tag-data-english.json'), 'w', encoding='utf-8') as f:
        json.dump({'python': 2, 'django': 1}, f)
    return posts_dir, tag_data_dir


SITE_POSTS_DIR, SITE_TAG_DATA_DIR = _make_site_dirs()


# ──────────────────────────────────────────────
# 단위 테스트: 태그 인덱스
# ──────────────────────────────────────────────

class SlugTest(SimpleTestCase):
    def test_basic(self):
        self.assertEqual(slug('Machine Learning'), 'machine-learning')

    def test_punctuation_removed(self):
        self.assertEqual(slug('C++ & Rust!'), 'c--rust')
        self.assertEqual(slug('node.js'), 'nodejs')

    def test_unicode_kept(self):
        self.assertEqual(slug('Du lịch'), 'du-lịch')

    def test_each_space_becomes_hyphen(self):
        self.assertEqual(slug('a  b'), 'a--b')

    def test_decomposed_unicode_matches_composed(self):
        # macOS 편집기는 태그를 NFD로 저장하기도 함
        decomposed = unicodedata.normalize('NFD', 'Du lịch')
        self.assertEqual(slug(decomposed), slug('Du lịch'))
        self.assertEqual(slug(decomposed), 'du-l\u1ecbch')
        self.assertNotEqual(slug(decomposed), slug('Du lich'))

    def test_combining_mark_without_composed_form_kept(self):
        self.assertEqual(slug('x\u0301y'), 'x\u0301y')

    def test_slug_is_idempotent(self):
        for tag in ('Du lịch', 'C++ & Rust!', 'Machine Learning'):
            with self.subTest(tag=tag):
                self.assertEqual(slug(slug(tag)), slug(tag))


class CountTagsTest(SimpleTestCase):
    def test_counts_once_per_post(self):
        posts = [
            _post('a', ['Python', 'python', 'Django']),
            _post('b', ['Python']),
        ]
        self.assertEqual(count_tags(posts), {'python': 2, 'django': 1})

    def test_untagged_posts(self):
        posts = [Post(path='a', date='', title='a', tags=None)]
        self.assertEqual(count_tags(posts), {})


class DistinctAndRankTest(SimpleTestCase):
    def test_distinct_is_case_sensitive_and_ordered(self):
        posts = [_post('a', ['B', 'a']), _post('b', ['A', 'B'])]
        self.assertEqual(distinct_tags(posts), ['B', 'a', 'A'])

    def test_rank_missing_count_is_zero(self):
        self.assertEqual(rank_tags(['x', 'y'], {'y': 1}), ['y', 'x'])

    def test_rank_is_stable(self):
        self.assertEqual(rank_tags(['c', 'a', 'b'], {'a': 1, 'b': 1, 'c': 1}), ['c', 'a', 'b'])


class BuildTagIndexTest(SimpleTestCase):
    def test_first_appearance_breaks_ties(self):
        posts = [_post('1', ['A', 'B']), _post('2', ['B']), _post('3', ['C'])]
        counts = {PostType.ENGLISH: {'a': 5, 'b': 5, 'c': 1}}
        index = build_tag_index(posts, counts=counts)
        self.assertEqual(index[PostType.ENGLISH], ['A', 'B', 'C'])

    def test_empty_partition_yields_empty_list(self):
        posts = [_post('1', ['A'])]
        index = build_tag_index(posts)
        self.assertEqual(index[PostType.VIETNAMESE], [])

    def test_empty_corpus(self):
        self.assertEqual(build_tag_index([]), {PostType.VIETNAMESE: [], PostType.ENGLISH: []})

    def test_partitions_are_separate(self):
        posts = [
            _post('1', ['Python']),
            _post('2', ['Ẩm thực'], post_type=PostType.VIETNAMESE),
        ]
        index = build_tag_index(posts)
        self.assertEqual(index[PostType.ENGLISH], ['Python'])
        self.assertEqual(index[PostType.VIETNAMESE], ['Ẩm thực'])

    def test_no_duplicates_and_ranking_consistent(self):
        posts = [
            _post('1', ['x', 'y', 'z']),
            _post('2', ['y', 'z', 'y']),
            _post('3', ['z', 'X']),
        ]
        tags = build_tag_index(posts)[PostType.ENGLISH]
        self.assertEqual(len(tags), len(set(tags)))
        live = count_tags(posts)
        counts = [live.get(slug(t), 0) for t in tags]
        self.assertEqual(counts, sorted(counts, reverse=True))

    def test_live_counts_when_table_missing(self):
        posts = [_post('1', ['rare', 'common']), _post('2', ['common'])]
        index = build_tag_index(posts)
        self.assertEqual(index[PostType.ENGLISH], ['common', 'rare'])

    def test_external_table_takes_precedence(self):
        # 오래된 외부 테이블이어도 그대로 사용함
        posts = [_post('1', ['rare', 'common']), _post('2', ['common'])]
        index = build_tag_index(posts, counts={PostType.ENGLISH: {'rare': 10}})
        self.assertEqual(index[PostType.ENGLISH], ['rare', 'common'])

    def test_custom_partition_function(self):
        posts = [_post('en/1', ['a']), _post('fr/1', ['b'])]
        index = build_tag_index(
            posts,
            partition_of=lambda p: p.path.split('/')[0],
            partitions=None,
        )
        self.assertEqual(index, {'en': ['a'], 'fr': ['b']})

    def test_posts_without_partition_are_ignored(self):
        posts = [_post('1', ['a'], post_type=None)]
        self.assertEqual(build_tag_index(posts)[PostType.ENGLISH], [])


class BuildTagSectionsTest(SimpleTestCase):
    def setUp(self):
        self.posts = [
            _post('1', ['Python', 'Django']),
            _post('2', ['Python']),
        ]

    def test_empty_sections_skipped(self):
        sections = build_tag_sections(self.posts)
        self.assertEqual([s['key'] for s in sections], ['english'])
        self.assertEqual(sections[0]['label'], 'English')

    def test_items(self):
        sections = build_tag_sections(self.posts, active_path='/tags/django')
        items = sections[0]['tags']
        self.assertEqual([i['name'] for i in items], ['Python', 'Django'])
        self.assertEqual(items[0]['count'], 2)
        self.assertEqual(items[0]['href'], '/tags/python')
        self.assertFalse(items[0]['active'])
        self.assertTrue(items[1]['active'])

    def test_counts_come_from_ranking_table(self):
        sections = build_tag_sections(self.posts, counts={PostType.ENGLISH: {'django': 7}})
        items = sections[0]['tags']
        self.assertEqual([(i['name'], i['count']) for i in items], [('Django', 7), ('Python', 0)])

    def test_english_before_vietnamese(self):
        posts = [_post('1', ['Ăn'], post_type=PostType.VIETNAMESE), _post('2', ['Eat'])]
        sections = build_tag_sections(posts)
        self.assertEqual([s['label'] for s in sections], ['English', 'Tiếng Việt'])


class FilterPostsByTagTest(SimpleTestCase):
    def test_matches_slug(self):
        posts = [_post('1', ['Machine Learning']), _post('2', ['Python'])]
        result = filter_posts_by_tag(posts, 'machine-learning')
        self.assertEqual([p.path for p in result], ['1'])

    def test_decomposed_tag_does_not_collide(self):
        posts = [
            _post('1', [unicodedata.normalize('NFD', 'Du lịch')]),
            _post('2', ['Du lich']),
        ]
        self.assertEqual([p.path for p in filter_posts_by_tag(posts, 'du-l\u1ecbch')], ['1'])
        self.assertEqual([p.path for p in filter_posts_by_tag(posts, 'du-lich')], ['2'])


# ──────────────────────────────────────────────
# 단위 테스트: 페이지네이션
# ──────────────────────────────────────────────

class NormalizeBasePathTest(SimpleTestCase):
    def test_cases(self):
        cases = {
            '/blog': 'blog',
            '/blog/': 'blog',
            '/blog/page/2': 'blog',
            '/blog/page/12/': 'blog',
            '/tags/python/page/3': 'tags/python',
            '/': '',
            '': '',
        }
        for path, expected in cases.items():
            with self.subTest(path=path):
                self.assertEqual(normalize_base_path(path), expected)

    def test_idempotent(self):
        paths = [
            '/blog', '//blog', 'blog//', '/blog/page/2//', '/blog/page/2/page/3',
            '/page/2', 'page', '/tags/a b/page/x', '///', '/blog/page/',
        ]
        for path in paths:
            with self.subTest(path=path):
                once = normalize_base_path(path)
                self.assertEqual(normalize_base_path(once), once)

    def test_non_string(self):
        self.assertEqual(normalize_base_path(None), '')
        self.assertEqual(normalize_base_path(42), '')


class PageFromPathTest(SimpleTestCase):
    def test_page_segment(self):
        self.assertEqual(page_from_path('/blog/page/3'), 3)
        self.assertEqual(page_from_path('/blog/page/3/'), 3)

    def test_no_page_segment(self):
        self.assertEqual(page_from_path('/blog/'), 1)
        self.assertEqual(page_from_path(None), 1)


class ResolvePaginationTest(SimpleTestCase):
    def test_link_bounds(self):
        for total in range(1, 6):
            for current in range(1, total + 1):
                with self.subTest(current=current, total=total):
                    state = resolve_pagination('/blog', current, total)
                    self.assertEqual(state.prev_href is not None, current > 1)
                    self.assertEqual(state.next_href is not None, current < total)
                    self.assertEqual(state.has_prev, current > 1)
                    self.assertEqual(state.has_next, current < total)

    def test_second_page_links_to_base(self):
        state = resolve_pagination('/blog/page/2', 2, 3)
        self.assertEqual(state.prev_href, '/blog/')
        self.assertEqual(state.next_href, '/blog/page/3')

    def test_middle_page(self):
        state = resolve_pagination('/tags/python/page/3/', 3, 5)
        self.assertEqual(state.base_path, 'tags/python')
        self.assertEqual(state.prev_href, '/tags/python/page/2')
        self.assertEqual(state.next_href, '/tags/python/page/4')

    def test_first_page_next_uses_page_form(self):
        state = resolve_pagination('/blog/', 1, 2)
        self.assertIsNone(state.prev_href)
        self.assertEqual(state.next_href, '/blog/page/2')

    def test_disabled_controls_are_none(self):
        state = resolve_pagination('/blog', 1, 1)
        self.assertEqual(state, PaginationState(1, 1, 'blog', None, None))
        self.assertFalse(state.is_paginated)

    def test_root_base_path(self):
        state = resolve_pagination('/page/2', 2, 3)
        # '/page/2'는 앞의 '/'가 먼저 제거되어 page 접미사로 인식되지 않음
        self.assertEqual(state.base_path, 'page/2')
        state = resolve_pagination('', 2, 3)
        self.assertEqual(state.prev_href, '/')
        self.assertEqual(state.next_href, '/page/3')

    def test_out_of_range_is_clamped(self):
        state = resolve_pagination('/blog', 9, 3)
        self.assertEqual((state.current_page, state.total_pages), (3, 3))
        state = resolve_pagination('/blog', 0, 0)
        self.assertEqual((state.current_page, state.total_pages), (1, 1))

    def test_malformed_input(self):
        state = resolve_pagination(None, 'abc', None)
        self.assertEqual(state, PaginationState(1, 1, '', None, None))


class SelectVisibleTest(SimpleTestCase):
    def test_override_returned_verbatim(self):
        posts = [_post('1', []), _post('2', [])]
        override = posts[:1]
        self.assertIs(select_visible(posts, override), override)

    def test_empty_override_falls_back(self):
        posts = [_post('1', [])]
        self.assertIs(select_visible(posts, []), posts)
        self.assertIs(select_visible(posts), posts)


class PaginatePostsTest(SimpleTestCase):
    def setUp(self):
        self.posts = [_post(str(i), []) for i in range(5)]

    def test_slices(self):
        page_posts, current, total = paginate_posts(self.posts, 2, 2)
        self.assertEqual([p.path for p in page_posts], ['2', '3'])
        self.assertEqual((current, total), (2, 3))

    def test_empty_corpus_has_one_page(self):
        page_posts, current, total = paginate_posts([], 1, 2)
        self.assertEqual((page_posts, current, total), ([], 1, 1))

    def test_out_of_range(self):
        with self.assertRaises(EmptyPage):
            paginate_posts(self.posts, 4, 2)


# ──────────────────────────────────────────────
# 단위 테스트: utils 함수
# ──────────────────────────────────────────────

class ResolveAssetPathTest(SimpleTestCase):
    def test_external_urls_unchanged(self):
        self.assertEqual(utils.resolve_asset_path('https://x/y.png', '/blog'), 'https://x/y.png')
        self.assertEqual(utils.resolve_asset_path('http://x/y.png', '/blog'), 'http://x/y.png')

    def test_data_uri_unchanged(self):
        raw = 'data:image/png;base64,iVBORw0KGgo='
        self.assertEqual(utils.resolve_asset_path(raw, '/blog'), raw)

    def test_prefix(self):
        self.assertEqual(utils.resolve_asset_path('/static/img.png', '/blog'), '/blog/static/img.png')
        self.assertEqual(utils.resolve_asset_path('static/img.png', '/blog'), '/blog/static/img.png')

    def test_no_double_slash(self):
        self.assertEqual(utils.resolve_asset_path('//static/img.png', '/blog/'), '/blog/static/img.png')
        self.assertEqual(utils.resolve_asset_path('img.png', 'blog'), '/blog/img.png')

    def test_empty_base_path(self):
        self.assertEqual(utils.resolve_asset_path('static/img.png', ''), '/static/img.png')
        self.assertEqual(utils.resolve_asset_path('static/img.png', None), '/static/img.png')

    def test_none_raw_path(self):
        self.assertEqual(utils.resolve_asset_path(None, '/blog'), '/blog/')

    def test_static_image_path(self):
        self.assertEqual(utils.get_static_image_path('logo.png', '/blog'), '/blog/static/images/logo.png')
        self.assertEqual(utils.get_image_path('avatar.jpg'), '/avatar.jpg')


class ParseDateTest(SimpleTestCase):
    def test_values(self):
        from datetime import date, datetime
        self.assertEqual(utils._parse_date(date(2025, 6, 1)), '2025-06-01')
        self.assertEqual(utils._parse_date(datetime(2025, 6, 1, 9, 30)), '2025-06-01T09:30:00')
        self.assertEqual(utils._parse_date('2025-06-01'), '2025-06-01')
        self.assertEqual(utils._parse_date('2025-06-01 09:30:00'), '2025-06-01T09:30:00')

    def test_invalid(self):
        self.assertEqual(utils._parse_date('어제'), '')
        self.assertEqual(utils._parse_date(None), '')


class ParseTagsTest(SimpleTestCase):
    def test_comma_string(self):
        self.assertEqual(utils._parse_tags('python, django ,'), ['python', 'django'])

    def test_list(self):
        self.assertEqual(utils._parse_tags(['A', ' b ', '', None, 3]), ['A', 'b', '3'])

    def test_other(self):
        self.assertEqual(utils._parse_tags(None), [])

    def test_normalized_and_deduplicated(self):
        decomposed = unicodedata.normalize('NFD', 'Du lịch')
        self.assertEqual(utils._parse_tags([decomposed, 'Du l\u1ecbch', 'Python']), ['Du l\u1ecbch', 'Python'])


class ExtractFrontmatterTest(SimpleTestCase):
    def test_with_frontmatter(self):
        text = "---\ntitle: Test\ndate: 2025-01-01\n---\n\nHello body"
        meta, body = utils.extract_frontmatter_and_body(text)
        self.assertEqual(meta['title'], 'Test')
        self.assertEqual(body, 'Hello body')

    def test_without_frontmatter(self):
        text = "Just plain markdown content"
        meta, body = utils.extract_frontmatter_and_body(text)
        self.assertEqual(meta, {})
        self.assertEqual(body, text)

    def test_non_mapping_frontmatter(self):
        meta, _body = utils.extract_frontmatter_and_body("---\n- a\n- b\n---\nbody")
        self.assertEqual(meta, {})

    def test_dashes_inside_value(self):
        text = "---\ntitle: before---after\nsummary: x\n---\nBody"
        meta, body = utils.extract_frontmatter_and_body(text)
        self.assertEqual(meta, {'title': 'before---after', 'summary': 'x'})
        self.assertEqual(body, 'Body')

    def test_crlf_line_endings(self):
        text = "---\r\ntitle: Windows\r\n---\r\nBody"
        meta, body = utils.extract_frontmatter_and_body(text)
        self.assertEqual(meta['title'], 'Windows')
        self.assertEqual(body, 'Body')

    def test_unclosed_frontmatter(self):
        text = "---\ntitle: Open\nBody"
        self.assertEqual(utils.extract_frontmatter_and_body(text), ({}, text))


# ──────────────────────────────────────────────
# 통합 테스트: 게시글/태그 데이터 읽기
# ──────────────────────────────────────────────

class LoadPostsTest(SimpleTestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix='test_posts_load_')

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_sorted_newest_first(self):
        _write_post(self.test_dir, 'old', title='Old', date='2023-05-01', postType=1)
        _write_post(self.test_dir, 'new', title='New', date='2024-05-01', postType=0)
        posts = content.load_posts(self.test_dir)
        self.assertEqual([p.title for p in posts], ['New', 'Old'])
        self.assertEqual(posts[0].path, 'blog/new')
        self.assertEqual(posts[0].post_type, PostType.VIETNAMESE)

    def test_sort_compares_actual_instants(self):
        # 문자열로는 뒤지만 UTC로 환산하면 더 늦은 시각
        offset = _post('offset', [], date='2024-01-01T23:00:00-05:00')
        utc = _post('utc', [], date='2024-01-02T01:00:00+00:00')
        day_only = _post('day-only', [], date='2024-01-02')
        undated = _post('undated', [], date='')
        posts = content.sort_posts([undated, day_only, utc, offset])
        self.assertEqual([p.path for p in posts], ['offset', 'utc', 'day-only', 'undated'])

    def test_nested_path(self):
        _write_post(self.test_dir, 'series/part-1', title='Part 1', date='2024-01-01')
        posts = content.load_posts(self.test_dir)
        self.assertEqual(posts[0].path, 'blog/series/part-1')
        self.assertIsNone(posts[0].post_type)

    def test_drafts_skipped(self):
        _write_post(self.test_dir, 'draft', title='Draft', date='2024-01-01', draft=True)
        self.assertEqual(content.load_posts(self.test_dir), [])
        self.assertEqual(len(content.load_posts(self.test_dir, include_drafts=True)), 1)

    def test_invalid_yaml_skipped(self):
        with open(os.path.join(self.test_dir, 'broken.md'), 'w', encoding='utf-8') as f:
            f.write('---\ntitle: [unclosed\n---\nbody')
        _write_post(self.test_dir, 'ok', title='OK', date='2024-01-01')
        with self.assertLogs('listing.content', level='WARNING'):
            posts = content.load_posts(self.test_dir)
        self.assertEqual([p.title for p in posts], ['OK'])

    def test_non_utf8_skipped(self):
        with open(os.path.join(self.test_dir, 'latin.md'), 'wb') as f:
            f.write('---\ntitle: Café\n---\n'.encode('latin-1'))
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertEqual(content.load_posts(self.test_dir), [])

    def test_missing_directory(self):
        missing = os.path.join(self.test_dir, 'nope')
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertEqual(content.load_posts(missing), [])

    def test_fallback_title_and_tags(self):
        _write_post(self.test_dir, 'untitled-post', date='2024-01-01', tags='a, b')
        post = content.load_posts(self.test_dir)[0]
        self.assertEqual(post.title, 'untitled-post')
        self.assertEqual(post.tags, ('a', 'b'))


class LoadTagCountsTest(SimpleTestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix='test_tag_data_')

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write(self, text):
        filepath = os.path.join(self.test_dir, 'tag-data-english.json')
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(text)
        return filepath

    def test_valid(self):
        filepath = self._write('{"python": 3, "django": 1}')
        self.assertEqual(content.load_tag_counts(filepath), {'python': 3, 'django': 1})

    def test_invalid_counts_dropped(self):
        filepath = self._write('{"python": 3, "bad": "x", "neg": -1, "flag": true}')
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertEqual(content.load_tag_counts(filepath), {'python': 3})

    def test_invalid_json(self):
        filepath = self._write('{not json')
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertIsNone(content.load_tag_counts(filepath))

    def test_not_an_object(self):
        filepath = self._write('[1, 2]')
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertIsNone(content.load_tag_counts(filepath))

    def test_missing_file(self):
        with self.assertLogs('listing.content', level='WARNING'):
            self.assertIsNone(content.load_tag_counts(os.path.join(self.test_dir, "none.json")))

    def test_tag_data_path(self):
        path = content.tag_data_path(PostType.VIETNAMESE, self.test_dir)
        self.assertEqual(path.name, 'tag-data-vietnamese.json')


@override_settings(POSTS_DIR=SITE_POSTS_DIR, TAG_DATA_DIR=SITE_TAG_DATA_DIR)
class CachedContentTest(SimpleTestCase):
    def test_get_all_posts_excludes_drafts(self):
        titles = [p.title for p in content.get_all_posts()]
        self.assertEqual(titles, ['Third Post', 'Second Post', 'First Post'])

    def test_get_tag_counts_only_existing_files(self):
        tables = content.get_tag_counts()
        self.assertEqual(tables, {PostType.ENGLISH: {'python': 2, 'django': 1}})

    def test_corrupt_tag_data_falls_back_to_live_counts(self):
        broken_dir = tempfile.mkdtemp(prefix='test_tag_data_broken_')
        with open(os.path.join(broken_dir, 'tag-data-english.json'), 'w', encoding='utf-8') as f:
            f.write('{not json')
        with override_settings(TAG_DATA_DIR=broken_dir):
            with self.assertLogs('listing.content', level='WARNING'):
                tables = content.get_tag_counts()
            self.assertEqual(tables, {})
            sections = build_tag_sections(content.get_all_posts(), tables)
        english = {item['name']: item['count'] for item in sections[0]['tags']}
        self.assertEqual(english, {'Python': 2, 'Django': 1})
        shutil.rmtree(broken_dir, ignore_errors=True)

    def test_setting_change_clears_cache(self):
        self.assertEqual(len(content.get_all_posts()), 3)
        empty_dir = tempfile.mkdtemp(prefix='test_posts_empty_')
        with override_settings(POSTS_DIR=empty_dir):
            self.assertEqual(content.get_all_posts(), ())
        self.assertEqual(len(content.get_all_posts()), 3)


# ──────────────────────────────────────────────
# 통합 테스트: 뷰 / 템플릿
# ──────────────────────────────────────────────

@override_settings(POSTS_DIR=SITE_POSTS_DIR, TAG_DATA_DIR=SITE_TAG_DATA_DIR, POSTS_PER_PAGE=2, BASE_PATH='')
class PostListViewTest(SimpleTestCase):
    def test_first_page(self):
        resp = self.client.get('/blog/')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'Third Post')
        self.assertContains(resp, 'Second Post')
        self.assertNotContains(resp, 'First Post')
        self.assertNotContains(resp, 'Hidden Post')
        self.assertContains(resp, '1 of 2')
        self.assertContains(resp, 'href="/blog/page/2" rel="next"')
        self.assertContains(resp, '<button class="disabled" disabled>Previous</button>', html=False)
        self.assertContains(resp, 'class="all-posts active"')

    def test_second_page_links_back_to_base(self):
        resp = self.client.get('/blog/page/2')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'First Post')
        self.assertContains(resp, '2 of 2')
        self.assertContains(resp, 'href="/blog/" rel="prev"')
        self.assertContains(resp, '<button class="disabled" disabled>Next</button>', html=False)
        self.assertNotContains(resp, '/page/1')

    def test_out_of_range_page(self):
        self.assertEqual(self.client.get('/blog/page/3').status_code, 404)
        self.assertEqual(self.client.get('/blog/page/0').status_code, 404)

    def test_post_fields_rendered(self):
        resp = self.client.get('/blog/')
        self.assertContains(resp, 'January 3, 2024')
        self.assertContains(resp, 'href="/blog/third-post"')
        self.assertContains(resp, 'Tóm tắt')

    def test_tag_panel(self):
        resp = self.client.get('/blog/')
        self.assertContains(resp, 'Python (2)')
        self.assertContains(resp, 'Django (1)')
        self.assertContains(resp, 'Du lịch (1)')
        self.assertContains(resp, 'href="/tags/python"')
        sections = resp.context['tag_sections']
        self.assertEqual([s['label'] for s in sections], ['English', 'Tiếng Việt'])

    @override_settings(BASE_PATH='/my-blog')
    def test_base_path_prefixes_links(self):
        resp = self.client.get('/blog/')
        self.assertContains(resp, 'href="/my-blog/blog/page/2" rel="next"')
        self.assertContains(resp, 'href="/my-blog/tags/python"')
        self.assertContains(resp, 'href="/my-blog/blog/third-post"')


@override_settings(POSTS_DIR=SITE_POSTS_DIR, TAG_DATA_DIR=SITE_TAG_DATA_DIR, POSTS_PER_PAGE=2, BASE_PATH='')
class TagPostListViewTest(SimpleTestCase):
    def test_filtered_by_tag(self):
        resp = self.client.get('/tags/python/')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, '<h1>Python</h1>', html=False)
        self.assertContains(resp, 'Second Post')
        self.assertContains(resp, 'First Post')
        self.assertNotContains(resp, 'Third Post')
        # 한 페이지뿐이면 이동 버튼을 그리지 않음
        self.assertNotContains(resp, 'class="pagination"')

    def test_active_tag_highlighted(self):
        resp = self.client.get('/tags/django/')
        self.assertContains(resp, '<h3 class="tag active">Django (1)</h3>', html=False)
        self.assertContains(resp, 'href="/blog"')

    def test_unknown_tag(self):
        self.assertEqual(self.client.get('/tags/golang/').status_code, 404)

    def test_tag_page_out_of_range(self):
        self.assertEqual(self.client.get('/tags/python/page/2').status_code, 404)

    def test_decomposed_slug_in_url(self):
        decomposed = unicodedata.normalize('NFD', 'du-l\u1ecbch')
        resp = self.client.get('/tags/' + quote(decomposed) + '/')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'Third Post')
        self.assertNotContains(resp, 'First Post')

    def test_url_accepts_combining_marks(self):
        match = resolve('/tags/x\u0301y/page/2')
        self.assertEqual(match.kwargs, {'tag': 'x\u0301y', 'page': '2'})


class TemplateTagsTest(SimpleTestCase):
    def test_with_base_path_filter(self):
        tpl = Template('{% load listing_tags %}{{ src|with_base_path:base_path }}')
        out = tpl.render(Context({'src': 'static/a.png', 'base_path': '/blog'}))
        self.assertEqual(out, '/blog/static/a.png')

    def test_static_image_tag(self):
        tpl = Template('{% load listing_tags %}{% static_image "logo.png" %}')
        out = tpl.render(Context({'base_path': '/blog'}))
        self.assertEqual(out, '/blog/static/images/logo.png')


# ──────────────────────────────────────────────
# 관리 명령
# ──────────────────────────────────────────────

@override_settings(POSTS_DIR=SITE_POSTS_DIR, TAG_DATA_DIR=SITE_TAG_DATA_DIR)
class BuildTagDataCommandTest(SimpleTestCase):
    def setUp(self):
        self.output_dir = tempfile.mkdtemp(prefix='test_tag_out_')

    def tearDown(self):
        shutil.rmtree(self.output_dir, ignore_errors=True)

    def test_writes_live_counts(self):
        out = io.StringIO()
        call_command('build_tag_data', output_dir=self.output_dir, stdout=out)

        with open(os.path.join(self.output_dir, 'tag-data-english.json'), encoding='utf-8') as f:
            self.assertEqual(json.load(f), {'django': 1, 'python': 2})
        with open(os.path.join(self.output_dir, 'tag-data-vietnamese.json'), encoding='utf-8') as f:
            self.assertEqual(json.load(f), {'du-lịch': 1})
        self.assertIn('English: 2 tags written', out.getvalue())
