from rest_framework import serializers

from .models import Report


class ReportCreateSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    description = serializers.CharField()
    problem_photo_url = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)


class ReportSerializer(serializers.ModelSerializer):
    reporter_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Report
        fields = ['id', 'request', 'reporter_id', 'reporter_name', 'reporter_phone', 'reporter_email',
                  'description', 'problem_photo_url', 'created_at']
        read_only_fields = fields
