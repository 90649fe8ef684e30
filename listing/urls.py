from django.urls import re_path
from . import views

app_name = 'listing'

# 베트남어 태그 slug(결합 문자 포함)를 허용하는 패턴
_TAG = r'(?P<tag>[^/]+)'
_PAGE = r'page/(?P<page>\d+)/?'

urlpatterns = [
    re_path(r'^blog/?$', views.post_list, name='post_list'),
    re_path(rf'^blog/{_PAGE}$', views.post_list, name='post_list_page'),
    re_path(rf'^tags/{_TAG}/?$', views.tag_post_list, name='tag_post_list'),
    re_path(rf'^tags/{_TAG}/{_PAGE}$', views.tag_post_list, name='tag_post_list_page'),
]
