import re
import unicodedata
from datetime import datetime, date

import yaml


_PASSTHROUGH_PREFIXES = ('http://', 'https://', 'data:')


def resolve_asset_path(raw_path, base_path=''):
    """이미지/링크 경로에 base path를 붙입니다.
    외부 URL과 data URI는 그대로 반환합니다."""
    if raw_path is None:
        raw_path = ''
    raw_path = str(raw_path)

    if raw_path.startswith(_PASSTHROUGH_PREFIXES):
        return raw_path

    prefix = (base_path or '').rstrip('/')
    if prefix and not prefix.startswith('/'):
        prefix = f'/{prefix}'
    return f"{prefix}/{raw_path.lstrip('/')}"


def get_image_path(image_path, base_path=''):
    """public 디렉토리 기준 이미지 경로를 정적 호스팅용 경로로 변환합니다."""
    return resolve_asset_path(image_path, base_path)


def get_static_image_path(filename, base_path=''):
    """static/images/ 아래 이미지의 전체 경로를 반환합니다."""
    return get_image_path(f'/static/images/{filename}', base_path)


def _parse_date(raw_date):
    """다양한 형태의 날짜를 ISO-8601 문자열로 변환합니다. 해석할 수 없으면 빈 문자열."""
    if isinstance(raw_date, (datetime, date)):
        return raw_date.isoformat()
    if isinstance(raw_date, str):
        raw_date = raw_date.strip()
        try:
            return date.fromisoformat(raw_date).isoformat()
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw_date).isoformat()
        except ValueError:
            pass
        try:
            return datetime.strptime(raw_date, '%Y-%m-%d %H:%M:%S').isoformat()
        except ValueError:
            return ''
    return ''


def _parse_tags(raw_tags):
    """frontmatter의 태그 값을 NFC 정규화된 중복 없는 리스트로 변환합니다.
    "a, b" 같은 문자열과 리스트를 모두 받습니다."""
    if isinstance(raw_tags, str):
        candidates = raw_tags.split(',')
    elif isinstance(raw_tags, (list, tuple)):
        candidates = [t for t in raw_tags if t is not None]
    else:
        return []

    tags = []
    for candidate in candidates:
        tag = unicodedata.normalize('NFC', str(candidate)).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _parse_bool(raw_value):
    if isinstance(raw_value, str):
        return raw_value.strip().lower() in ('true', 'yes', '1')
    return bool(raw_value)


# ---------------------------------------------------------------------------
# Frontmatter 파싱
# ---------------------------------------------------------------------------

_FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?(.*)\Z', re.S | re.M)


def extract_frontmatter_and_body(content):
    """frontmatter(dict)와 body(str)를 분리하여 반환합니다.
    구분선은 줄 전체가 --- 인 경우만 인정합니다.
    YAML 오류가 있으면 yaml.YAMLError를 그대로 올립니다."""
    match = _FRONTMATTER_RE.match(content)
    if match is None:
        return {}, content

    meta = yaml.safe_load(match.group(1)) or {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, match.group(2).strip()
