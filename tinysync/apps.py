from django.apps import AppConfig


class TinysyncAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tinysync'
    verbose_name = 'Tiny ERP sync'
