from django.db import models


class Shop(models.Model):
    name = models.CharField(max_length=64)
    active = models.BooleanField(default=True)

    def __str__(self):
        return self.name


class Language(models.Model):
    name = models.CharField(max_length=32)
    # Two-letter ISO 639-1 code, e.g. "fr"
    iso_code = models.CharField(max_length=2, unique=True)
    # IETF locale, e.g. "fr-FR"
    locale = models.CharField(max_length=5, unique=True)
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.locale})"


class ConfigurationValue(models.Model):
    key = models.CharField(max_length=254, unique=True)
    value = models.TextField(blank=True, default="")

    class Meta:
        db_table = "configuration"

    def __str__(self):
        return self.key
