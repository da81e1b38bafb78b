from django.apps import AppConfig


class PlacementsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'placements'
    verbose_name = 'Placements'
