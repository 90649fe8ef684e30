from django.core.signals import setting_changed
from django.dispatch import receiver

from .content import clear_caches

_CONTENT_SETTINGS = {'POSTS_DIR', 'TAG_DATA_DIR', 'BASE_DIR'}


@receiver(setting_changed)
def reload_content_on_setting_change(sender, setting, **kwargs):
    # 게시글/태그 데이터 위치가 바뀌면 캐시된 코퍼스를 버림
    if setting in _CONTENT_SETTINGS:
        clear_caches()
