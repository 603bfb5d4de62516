from rest_framework import serializers


class ProductAssociationSerializer(serializers.Serializer):
    """Documents one association search match; payloads are built as dicts."""

    id = serializers.IntegerField()
    name = serializers.CharField(help_text="Name, suffixed with ' (ref: <reference>)' when set")
    image = serializers.CharField(allow_blank=True)


class SearchErrorSerializer(serializers.Serializer):
    message = serializers.CharField()
