# tasks/serializers.py

from rest_framework import serializers
from .models import Task


class TaskSerializer(serializers.ModelSerializer):
    """Read representation; all writes go through TaskRecordService."""
    class Meta:
        model = Task
        fields = [
            'id', 'user', 'title', 'description', 'priority', 'status',
            'ai_priority_score', 'ai_reasoning', 'due_date',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class TaskInputSerializer(serializers.Serializer):
    """
    Shape coercion for create/update payloads. Business rules (lengths,
    enums, sanitizing) stay in the service so every caller gets them.
    """
    title = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    priority = serializers.CharField(required=False)
    status = serializers.CharField(required=False)
    due_date = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TaskMatrixCellSerializer(serializers.Serializer):
    impact = serializers.CharField()
    effort = serializers.CharField()
    label = serializers.CharField()
    tasks = TaskSerializer(many=True)


class RescoreRequestSerializer(serializers.Serializer):
    reclassify = serializers.BooleanField(required=False, default=True)
