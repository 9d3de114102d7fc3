import os

from dotenv import load_dotenv
from celery import Celery

load_dotenv()  # same .env as settings.py

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'taskmatrix.settings')

app = Celery('taskmatrix')

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps, plus the AI engine
# package which is not an app of its own.
app.autodiscover_tasks()
app.autodiscover_tasks(['tasks.ai_engine'], related_name='celery_tasks')
