from django import template

from ..utils import get_static_image_path, resolve_asset_path

register = template.Library()


@register.filter
def with_base_path(raw_path, base_path=''):
    """{{ post.image|with_base_path:base_path }}"""
    return resolve_asset_path(raw_path, base_path)


@register.simple_tag(takes_context=True)
def static_image(context, filename):
    return get_static_image_path(filename, context.get('base_path', ''))
