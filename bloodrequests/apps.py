from django.apps import AppConfig


class BloodRequestsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bloodrequests'
    verbose_name = 'Blood Requests'

    def ready(self):
        import bloodrequests.signals  # noqa: F401
