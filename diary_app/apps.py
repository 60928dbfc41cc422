# diary_app/apps.py
from django.apps import AppConfig


class DiaryAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'diary_app'
    verbose_name = 'Milk Diary'

    def ready(self):
        from . import feeds
        feeds.connect_signals()
