from django.urls import path
from .views import detail_view
from .views import list_create_view
from .views import matrix_view
from .views import rescore_view
from .views import toggle_complete_view

urlpatterns=[
    # GET and POST (List tasks and Create new task)
    path('',list_create_view,name="task-list-create"),

    path('matrix/',matrix_view,name="task-matrix"),
    path('rescore/',rescore_view,name="task-rescore"),

    # GET, PATCH, DELETE (Detail and Manipulation)
    path('<uuid:pk>/',detail_view,name="task-detail"),
    path('<uuid:pk>/toggle/',toggle_complete_view,name="task-toggle")
]
