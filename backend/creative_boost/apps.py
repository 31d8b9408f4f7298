from django.apps import AppConfig


class CreativeBoostConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.creative_boost'
    verbose_name = 'Creative Boost'
