import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .ai_engine.celery_tasks import rescore_open_tasks
from .serializers import (
    RescoreRequestSerializer,
    TaskInputSerializer,
    TaskMatrixCellSerializer,
    TaskSerializer,
)
from .services import TaskRecordService

logger = logging.getLogger(__name__)

# ServiceResult.error_code -> HTTP status
ERROR_STATUS = {
    "AUTH_REQUIRED": status.HTTP_401_UNAUTHORIZED,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "STORAGE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def join_errors(errors):
    """Flatten serializer errors into one "field: message, ..." string."""
    messages = []
    for field, field_errors in errors.items():
        for message in field_errors:
            if field == "non_field_errors":
                messages.append(str(message))
            else:
                messages.append(f"{field}: {message}")
    return ", ".join(messages)


class TaskServiceView(APIView):
    """
    Base view: every endpoint delegates to TaskRecordService and renders its
    result as {success, data, error}.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get_service(self):
        return TaskRecordService()

    def render_error(self, message, http_status):
        return Response({"success": False, "error": message}, status=http_status)

    def render_result(self, result, serializer_class=None, many=False, success_status=status.HTTP_200_OK):
        if not result.success:
            return self.render_error(
                result.error,
                ERROR_STATUS.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            )
        data = result.data
        if serializer_class is not None and data is not None:
            data = serializer_class(data, many=many).data
        return Response({"success": True, "data": data}, status=success_status)

    def parse_input(self, request, serializer_class=TaskInputSerializer):
        """
        Coerce the payload. Returns (data, None), or (None, response) with the
        shape errors joined into a 400 body.
        """
        serializer = serializer_class(data=request.data)
        if serializer.is_valid():
            return serializer.validated_data, None
        return None, self.render_error(join_errors(serializer.errors), status.HTTP_400_BAD_REQUEST)


class TaskListCreateView(TaskServiceView):
    """
    GET: The authenticated user's tasks, newest first.
         Optional query filters: status, priority, limit.
    POST: Create a task; priority and score are AI-derived.
    """

    def get(self, request):
        result = self.get_service().get_tasks(
            request.user,
            status=request.query_params.get("status") or None,
            priority=request.query_params.get("priority") or None,
            limit=request.query_params.get("limit") or None,
        )
        return self.render_result(result, TaskSerializer, many=True)

    def post(self, request):
        data, error_response = self.parse_input(request)
        if error_response is not None:
            return error_response
        result = self.get_service().create_task(request.user, data)
        return self.render_result(result, TaskSerializer, success_status=status.HTTP_201_CREATED)

list_create_view=TaskListCreateView.as_view()


class TaskDetailView(TaskServiceView):
    """
    GET, PATCH, DELETE for one of the user's own tasks.
    Another user's id behaves exactly like a missing one.
    """

    def get(self, request, pk):
        result = self.get_service().get_task_by_id(request.user, pk)
        return self.render_result(result, TaskSerializer)

    def patch(self, request, pk):
        data, error_response = self.parse_input(request)
        if error_response is not None:
            return error_response
        result = self.get_service().update_task(request.user, pk, data)
        return self.render_result(result, TaskSerializer)

    def delete(self, request, pk):
        result = self.get_service().delete_task(request.user, pk)
        if result.success:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return self.render_result(result)

detail_view=TaskDetailView.as_view()


class TaskToggleCompleteView(TaskServiceView):
    """POST: Flip between completed and todo."""

    def post(self, request, pk):
        result = self.get_service().toggle_complete(request.user, pk)
        return self.render_result(result, TaskSerializer)

toggle_complete_view=TaskToggleCompleteView.as_view()


class TaskMatrixView(TaskServiceView):
    """GET: Tasks grouped into the 3x3 impact/effort matrix (optional ?status=)."""

    def get(self, request):
        result = self.get_service().get_task_matrix(
            request.user,
            status=request.query_params.get("status") or None,
        )
        return self.render_result(result, TaskMatrixCellSerializer, many=True)

matrix_view=TaskMatrixView.as_view()


class TaskRescoreView(TaskServiceView):
    """POST: Queue a background rescoring of the user's open tasks."""

    def post(self, request):
        data, error_response = self.parse_input(request, RescoreRequestSerializer)
        if error_response is not None:
            return error_response

        try:
            job = rescore_open_tasks.delay(request.user.pk, data["reclassify"])
        except Exception as e:
            # Broker unreachable or refusing the message
            logger.exception(f"Could not queue rescoring for user {request.user.pk}: {e}")
            return self.render_error("Could not queue rescoring", status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(
            {"success": True, "data": {"job_id": job.id}},
            status=status.HTTP_202_ACCEPTED,
        )

rescore_view=TaskRescoreView.as_view()
